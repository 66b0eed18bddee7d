#!/usr/bin/env python3

"""
Pad names for compiled filtergraphs.

Every name is a pure function of its indices and role, so a specification
always compiles to the same graph text.
"""

#============================================

AUDIO_MIX = 'audioMix'
AUDIO_SILENCE = 'audioSilence'

#============================================

def scene_background(scene_index: int) -> str:
	return f"scene{scene_index}_bg"

#============================================

def scene_layer(scene_index: int, layer_index: int) -> str:
	return f"scene{scene_index}_layer{layer_index}"

#============================================

def scene_media(scene_index: int, layer_index: int) -> str:
	return f"scene{scene_index}_media{layer_index}"

#============================================

def transition(scene_index: int) -> str:
	return f"xfade{scene_index}"

#============================================

def audio_track(track_index: int) -> str:
	return f"audio{track_index}"

#============================================

def audio_mix() -> str:
	return AUDIO_MIX

#============================================

def audio_silence() -> str:
	return AUDIO_SILENCE

#============================================

def input_video(input_index: int) -> str:
	return f"{input_index}:v"

#============================================

def input_audio(input_index: int) -> str:
	return f"{input_index}:a"

#============================================

def input_index_of(pad: str):
	"""
	Return the input index referenced by an input stream pad, or None.
	"""
	head = pad.split(':', 1)[0]
	if not head.isdigit():
		return None
	return int(head)
