"""Chart-pattern detectors with volume confirmation.

Each detector scans the trailing ``lookback`` bars for local extrema,
requires near-equal peaks (or valleys) separated by more than two bars,
checks that the latest price has broken the pattern's support or
resistance, and confirms with a volume clause. They return plain bools
and are consumed as extra model context, never as trade triggers.
"""

from decimal import Decimal

from trader.indicators.averages import mean

_PEAK_TOLERANCE = Decimal("0.05")
_SHOULDER_TOLERANCE = Decimal("0.1")
_MIN_SEPARATION = 2
_BREAKOUT_VOLUME = Decimal("2")
_HEAD_VOLUME = Decimal("1.5")
_VOLUME_COLLAPSE = Decimal("0.8")
_VALLEY_SPIKE = Decimal("1.5")
_TRIPLE_BOTTOM_WINDOW = 20


def _window(
    prices: list[Decimal], volumes: list[Decimal], lookback: int
) -> tuple[list[Decimal], list[Decimal]]:
    n = min(len(prices), len(volumes), lookback)
    return prices[-n:] if n else [], volumes[-n:] if n else []


def _is_peak(prices: list[Decimal], i: int) -> bool:
    return prices[i] > prices[i - 1] and prices[i] > prices[i + 1]


def _is_valley(prices: list[Decimal], i: int) -> bool:
    return prices[i] < prices[i - 1] and prices[i] < prices[i + 1]


def _similar(a: Decimal, b: Decimal, tolerance: Decimal) -> bool:
    return b != 0 and abs(a - b) / b < tolerance


def _volume_confirms(volumes: list[Decimal], top_index: int) -> bool:
    """Breakout volume on the last top, or volume collapsing right after it."""
    top_volume = volumes[top_index]
    post_volume = volumes[top_index + 1] if top_index + 1 < len(volumes) else volumes[-1]
    return top_volume > mean(volumes) * _BREAKOUT_VOLUME or post_volume < top_volume * _VOLUME_COLLAPSE


def is_double_top(prices: list[Decimal], volumes: list[Decimal], lookback: int = 30) -> bool:
    """Two similar peaks with the latest price below the trough between them."""
    p, v = _window(prices, volumes, lookback)
    first = second = -1
    for i in range(1, len(p) - 1):
        if not _is_peak(p, i):
            continue
        if first < 0:
            first = i
        elif _similar(p[i], p[first], _PEAK_TOLERANCE) and i > first + _MIN_SEPARATION:
            second = i
            break

    if second < 0:
        return False
    trough = min(p[first + 1 : second])
    return p[-1] < trough and _volume_confirms(v, second)


def is_triple_top(prices: list[Decimal], volumes: list[Decimal], lookback: int = 30) -> bool:
    """Three similar peaks with the latest price below the lower of the two troughs."""
    p, v = _window(prices, volumes, lookback)
    tops: list[int] = []
    for i in range(1, len(p) - 1):
        if not _is_peak(p, i):
            continue
        if not tops:
            tops.append(i)
        elif _similar(p[i], p[tops[-1]], _PEAK_TOLERANCE) and i > tops[-1] + _MIN_SEPARATION:
            tops.append(i)
            if len(tops) == 3:
                break

    if len(tops) < 3:
        return False
    support = min(min(p[tops[0] + 1 : tops[1]]), min(p[tops[1] + 1 : tops[2]]))
    return p[-1] < support and _volume_confirms(v, tops[2])


def is_head_and_shoulders(
    prices: list[Decimal], volumes: list[Decimal], lookback: int = 30
) -> bool:
    """Left shoulder, higher head, right shoulder near the left one, neckline broken.

    Volume confirms when the head traded well above average or the right
    shoulder traded clearly below the head.
    """
    p, v = _window(prices, volumes, lookback)
    left = head = right = -1
    for i in range(1, len(p) - 1):
        if not _is_peak(p, i):
            continue
        if left < 0:
            left = i
        elif head < 0 and p[i] > p[left] and i > left + _MIN_SEPARATION:
            head = i
        elif (
            head >= 0
            and p[i] < p[head]
            and _similar(p[i], p[left], _SHOULDER_TOLERANCE)
            and i > head + _MIN_SEPARATION
        ):
            right = i
            break

    if right < 0:
        return False
    neckline = min(min(p[left + 1 : head]), min(p[head + 1 : right]))
    volume_ok = v[head] > mean(v) * _HEAD_VOLUME or v[right] < v[head] * _VOLUME_COLLAPSE
    return p[-1] < neckline and volume_ok


def is_triple_bottom(prices: list[Decimal], volumes: list[Decimal]) -> bool:
    """Three valleys at a similar level with fading volume, then an upside break.

    Looks at the last 20 bars only. Valleys must sit within 5% of the window's
    range of each other, valley volume must fall each time, today's volume must
    beat the valley average by 50%, and price must clear the high of the four
    bars before it.
    """
    if len(prices) < _TRIPLE_BOTTOM_WINDOW or len(volumes) < _TRIPLE_BOTTOM_WINDOW:
        return False
    p = prices[-_TRIPLE_BOTTOM_WINDOW:]
    v = volumes[-_TRIPLE_BOTTOM_WINDOW:]

    valleys = [i for i in range(1, len(p) - 1) if _is_valley(p, i)]
    if len(valleys) < 3:
        return False
    a, b, c = valleys[-3:]

    price_range = max(p) - min(p)
    similar = all(abs(p[i] - p[a]) < price_range * _PEAK_TOLERANCE for i in (a, b, c))
    fading = v[b] < v[a] and v[c] < v[b]
    spike = v[-1] > mean([v[a], v[b], v[c]]) * _VALLEY_SPIKE
    breaking_up = p[-1] > max(p[-5:-1])
    return similar and fading and spike and breaking_up
