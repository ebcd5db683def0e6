import math

from errors import InvalidInputError


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def align_linear(len_ref: int, len_cmp: int) -> list[tuple[int, int]]:
    """Linear time-warp between two sequences of different lengths.

    Produces N = min(len_ref, len_cmp) (ref_idx, cmp_idx) pairs spread evenly
    over both sequences, first frame to first frame and last to last.
    No dynamic time warping: the mapping depends only on the two lengths.
    """
    if len_ref <= 0 or len_cmp <= 0:
        raise InvalidInputError("Cannot align an empty sequence")

    n = min(len_ref, len_cmp)
    if n == 1:
        return [(0, 0)]

    ref_step = (len_ref - 1) / (n - 1)
    cmp_step = (len_cmp - 1) / (n - 1)
    return [
        (_round_half_up(i * ref_step), _round_half_up(i * cmp_step))
        for i in range(n)
    ]
