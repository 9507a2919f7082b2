import math
import numba


@numba.njit(cache=True)
def _distance_to_multiple(value, period):
  k = math.floor(value / period + 0.5)
  return abs(value - k * period)


@numba.njit(cache=True)
def truncate_real_or_imaginary_part(real, imag, input_argument, epsilon):
  """Snap floating residue of a multivalued function result.

  The result's argument is compared with the nearest multiple of pi (imaginary
  part dropped) and the nearest odd multiple of pi/2 (real part dropped). The
  tolerance scales with the argument of the function's input, which is the
  error made when that angle was computed.
  """
  re = float(real)
  im = float(imag)
  if math.isnan(re) or math.isnan(im):
    return re, im
  argument = math.atan2(im, re)
  tolerance = 10.0 * float(epsilon) * abs(float(input_argument))
  if _distance_to_multiple(argument, math.pi) <= tolerance:
    return re, 0.0
  if _distance_to_multiple(argument - math.pi / 2.0, math.pi) <= tolerance:
    return 0.0, im
  return re, im


@numba.njit(cache=True)
def neglect_relative_parts(real, imag, reference, epsilon):
  """Drop a part whose magnitude is below epsilon relative to `reference`"""
  re = float(real)
  im = float(imag)
  threshold = float(epsilon) * abs(float(reference))
  if abs(re) <= threshold:
    re = 0.0
  if abs(im) <= threshold:
    im = 0.0
  return re, im


@numba.njit(cache=True)
def round_to_error(answer, error):
  """Round `answer` to a multiple of 10^(order of `error` + 2)"""
  step = 10.0 ** (int(math.log10(abs(error))) + 2.0)
  q = answer / step
  # halves go away from zero
  return math.copysign(math.floor(abs(q) + 0.5), q) * step
