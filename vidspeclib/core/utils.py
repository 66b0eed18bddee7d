#!/usr/bin/env python3

import os
from decimal import Decimal
from fractions import Fraction

#============================================

QUIET_MODE = False

#============================================

class StructuralError(RuntimeError):
	"""
	Raised when a specification cannot be compiled into a consistent graph.
	"""
	pass

#============================================

def set_quiet_mode(value: bool) -> None:
	global QUIET_MODE
	QUIET_MODE = bool(value)

#============================================

def is_quiet_mode() -> bool:
	return QUIET_MODE

#============================================

def log(message: str) -> None:
	if is_quiet_mode():
		return
	print(message)

#============================================

def to_decimal(value) -> Decimal:
	if value is None:
		raise RuntimeError("time value is required")
	if isinstance(value, Decimal):
		return value
	if isinstance(value, bool):
		raise RuntimeError("time values must be numeric")
	if isinstance(value, int):
		return Decimal(value)
	if isinstance(value, float):
		return Decimal(str(value))
	if isinstance(value, str):
		return Decimal(value.strip())
	raise RuntimeError("time values must be numeric")

#============================================

def format_number(value) -> str:
	"""
	Format a number for filter text: integers without a decimal point,
	other values with at most six decimals and no trailing zeros.
	"""
	number = to_decimal(value)
	text = f"{number:.6f}"
	if '.' in text:
		text = text.rstrip('0').rstrip('.')
	if text in ('-0', ''):
		text = '0'
	return text

#============================================

def parse_fps(raw_fps) -> Fraction:
	if raw_fps is None:
		raise RuntimeError("output.fps is required")
	if isinstance(raw_fps, bool):
		raise RuntimeError("output.fps must be int, float, or fraction string")
	if isinstance(raw_fps, int):
		return Fraction(raw_fps, 1)
	if isinstance(raw_fps, float):
		return Fraction(str(raw_fps))
	if isinstance(raw_fps, str):
		try:
			if '/' in raw_fps:
				parts = raw_fps.split('/')
				return Fraction(int(parts[0]), int(parts[1]))
			return Fraction(raw_fps)
		except (ValueError, ZeroDivisionError):
			raise RuntimeError(f"output.fps is not a valid rate: {raw_fps}")
	raise RuntimeError("output.fps must be int, float, or fraction string")

#============================================

def format_rate(rate) -> str:
	"""
	Frame rate text: whole rates as integers, fractional ones as num/den.
	"""
	if isinstance(rate, Fraction):
		if rate.denominator == 1:
			return str(rate.numerator)
		return f"{rate.numerator}/{rate.denominator}"
	return format_number(rate)

#============================================

def round_half_up_fraction(value: Fraction) -> int:
	numerator = value.numerator
	denominator = value.denominator
	whole = numerator // denominator
	remainder = numerator - (whole * denominator)
	if remainder * 2 >= denominator:
		return whole + 1
	return whole

#============================================

def milliseconds_from_seconds(seconds) -> int:
	seconds_fraction = Fraction(str(to_decimal(seconds)))
	return round_half_up_fraction(seconds_fraction * 1000)

#============================================

def resolve_path(src: str, base_path: str) -> str:
	if os.path.isabs(src):
		return src
	return os.path.join(base_path, src)

#============================================

def escape_filter_value(value: str) -> str:
	"""
	Escape a plain option value (paths, font names) for a filtergraph.
	"""
	escaped = value.replace('\\', '\\\\')
	escaped = escaped.replace(':', '\\:')
	escaped = escaped.replace("'", "\\'")
	return escaped

#============================================

def escape_drawtext(text: str) -> str:
	"""
	Escape drawtext content that sits inside single quotes in a filtergraph.
	"""
	escaped = text.replace('\\', '\\\\\\\\')
	escaped = escaped.replace("'", "'\\\\\\''")
	escaped = escaped.replace(':', '\\\\:')
	escaped = escaped.replace('%', '\\\\%')
	return escaped

#============================================

def format_value(value) -> str:
	if isinstance(value, bool):
		return '1' if value else '0'
	if isinstance(value, Fraction):
		return format_rate(value)
	if isinstance(value, (int, float, Decimal)):
		return format_number(value)
	return str(value)

#============================================

def format_filter(name: str, *options) -> str:
	"""
	Render one filter as name=opt:opt.

	Options are (key, value) pairs or bare positional values.
	"""
	parts = []
	for option in options:
		if isinstance(option, tuple):
			(key, value) = option
			parts.append(f"{key}={format_value(value)}")
		else:
			parts.append(format_value(option))
	if len(parts) == 0:
		return name
	return name + '=' + ':'.join(parts)
