"""String similarity algorithms and best-candidate selection."""

from typing import Callable, Iterable, Optional, Tuple
import Levenshtein

from ..config.models import Algorithm, CustomSimilarity, SimilarityAlgorithm, SimilarityConfig

# Edit distance builds an O(n*m) table; longer inputs are rejected.
MAX_INPUT_LENGTH = 10_000

JARO_WINKLER_FLOOR = 0.7


def edit_distance(str1: str, str2: str) -> int:
    """
    Minimum number of single-character insertions, deletions and
    substitutions turning one string into the other.

    Raises:
        ValueError: If either input exceeds MAX_INPUT_LENGTH
    """
    str1 = str1 or ''
    str2 = str2 or ''
    if len(str1) > MAX_INPUT_LENGTH or len(str2) > MAX_INPUT_LENGTH:
        raise ValueError(
            f"Edit distance input exceeds {MAX_INPUT_LENGTH} characters"
        )
    if str1 == str2:
        return 0
    return Levenshtein.distance(str1, str2)


def edit_distance_similarity(str1: str, str2: str) -> float:
    """Edit distance scaled to [0, 1] by the longer string's length."""
    if str1 == str2:
        return 1.0
    if not str1 or not str2:
        return 0.0
    return 1.0 - edit_distance(str1, str2) / max(len(str1), len(str2))


def jaro_similarity(str1: str, str2: str) -> float:
    """
    Jaro similarity.

    Each character of ``str1`` claims the first unmatched equal character of
    ``str2`` inside the match window; transpositions are counted by walking
    both sets of matched characters in order.
    """
    if str1 == str2:
        return 1.0
    if not str1 or not str2:
        return 0.0

    len1, len2 = len(str1), len(str2)
    match_window = max(0, max(len1, len2) // 2 - 1)

    str1_matches = [False] * len1
    str2_matches = [False] * len2
    matches = 0

    for i, char in enumerate(str1):
        start = max(0, i - match_window)
        end = min(i + match_window + 1, len2)
        for j in range(start, end):
            if str2_matches[j] or str2[j] != char:
                continue
            str1_matches[i] = True
            str2_matches[j] = True
            matches += 1
            break

    if matches == 0:
        return 0.0

    transpositions = 0
    k = 0
    for i in range(len1):
        if not str1_matches[i]:
            continue
        while not str2_matches[k]:
            k += 1
        if str1[i] != str2[k]:
            transpositions += 1
        k += 1

    return (
        matches / len1 +
        matches / len2 +
        (matches - transpositions / 2) / matches
    ) / 3


def jaro_winkler_similarity(
    str1: str,
    str2: str,
    prefix_length: int = 4,
    scaling_factor: float = 0.1
) -> float:
    """
    Jaro-Winkler similarity.

    Scores below the 0.7 floor get no prefix bonus.

    Args:
        str1: First string
        str2: Second string
        prefix_length: Maximum common prefix length rewarded
        scaling_factor: Bonus weight per common prefix character

    Returns:
        float: Similarity score between 0 and 1
    """
    jaro = jaro_similarity(str1, str2)
    if jaro < JARO_WINKLER_FLOOR:
        return jaro

    common_prefix = 0
    for c1, c2 in zip(str1[:prefix_length], str2[:prefix_length]):
        if c1 != c2:
            break
        common_prefix += 1

    return jaro + scaling_factor * common_prefix * (1 - jaro)


_ALGORITHMS = {
    SimilarityAlgorithm.EDIT_DISTANCE: edit_distance_similarity,
    SimilarityAlgorithm.JARO: jaro_similarity,
    SimilarityAlgorithm.JARO_WINKLER: jaro_winkler_similarity,
}


def similarity(
    str1: Optional[str],
    str2: Optional[str],
    algorithm: Algorithm = SimilarityAlgorithm.JARO_WINKLER
) -> float:
    """
    Calculate similarity between two strings.

    Args:
        str1: First string
        str2: Second string
        algorithm: Built-in algorithm or custom similarity wrapper

    Returns:
        float: Similarity score between 0 (no match) and 1 (identical)

    Raises:
        ValueError: If the algorithm is unknown
    """
    if isinstance(algorithm, CustomSimilarity):
        return float(algorithm(str1 or '', str2 or ''))

    try:
        func = _ALGORITHMS[SimilarityAlgorithm(algorithm)]
    except (ValueError, KeyError):
        raise ValueError(f"Unknown algorithm: {algorithm}")

    if str1 is None and str2 is None:
        return 1.0
    if str1 is None or str2 is None:
        return 0.0
    if str1 == str2:
        return 1.0
    if not str1 or not str2:
        return 0.0
    return func(str1, str2)


def score(str1: str, str2: str, config: SimilarityConfig) -> float:
    """Score two prepared strings with the configured algorithm."""
    return similarity(str1 or '', str2 or '', config.algorithm)


def find_best(
    candidates: Iterable[str],
    scorer: Callable[[str], float],
    validator: Optional[Callable[[str], bool]] = None
) -> Tuple[Optional[str], float]:
    """
    Pick the highest scoring candidate.

    Candidates are visited in order; a later candidate replaces the current
    best only with a strictly greater score, so ties keep the earliest one.
    Empty candidates and candidates rejected by ``validator`` are skipped.

    Args:
        candidates: Candidate strings
        scorer: Function scoring a candidate
        validator: Optional acceptance check

    Returns:
        Tuple[Optional[str], float]: Best candidate (None if none scored
        above zero) and its score
    """
    best_match = None
    best_score = 0.0

    for candidate in candidates:
        if not candidate:
            continue
        if validator is not None and not validator(candidate):
            continue

        candidate_score = scorer(candidate)
        if candidate_score > best_score:
            best_score = candidate_score
            best_match = candidate

    return best_match, best_score
