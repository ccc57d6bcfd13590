"""Porter suffix-stripping stemmer.

Implements the algorithm described in M.F. Porter, "An algorithm for suffix
stripping", Program 14(3), 1980, pp. 130-137, including the two well-known
bounds fixes for inputs such as ``aed`` and ``ion``.

The stemmer is a total function over strings: it never raises, returns
words of two characters or fewer unchanged, and expects lowercase input
(lowercasing is the caller's job).

Example::

    >>> stem("caresses")
    'caress'
    >>> stem("relational")
    'relat'
"""

from __future__ import annotations

from typing import Optional

_VOWELS = frozenset("aeiou")

# Step 3: double suffixes mapped to single ones, keyed on the penultimate
# letter of the word. Rules are tried in order and the first suffix that
# matches ends the step, whether or not the measure condition holds.
_STEP3_RULES: dict[str, tuple[tuple[str, str], ...]] = {
    "a": (("ational", "ate"), ("tional", "tion")),
    "c": (("enci", "ence"), ("anci", "ance")),
    "e": (("izer", "ize"),),
    "l": (
        ("bli", "ble"),
        ("alli", "al"),
        ("entli", "ent"),
        ("eli", "e"),
        ("ousli", "ous"),
    ),
    "o": (("ization", "ize"), ("ation", "ate"), ("ator", "ate")),
    "s": (
        ("alism", "al"),
        ("iveness", "ive"),
        ("fulness", "ful"),
        ("ousness", "ous"),
    ),
    "t": (("aliti", "al"), ("iviti", "ive"), ("biliti", "ble")),
    "g": (("logi", "log"),),
}

# Step 4: -ic-, -full, -ness etc., keyed on the last letter.
_STEP4_RULES: dict[str, tuple[tuple[str, str], ...]] = {
    "e": (("icate", "ic"), ("ative", ""), ("alize", "al")),
    "i": (("iciti", "ic"),),
    "l": (("ical", "ic"), ("ful", "")),
    "s": (("ness", ""),),
}

# Step 5: suffixes removed in context <c>vcvc<v>, keyed on the penultimate
# letter. "ement" must precede "ment", which must precede "ent".
_STEP5_SUFFIXES: dict[str, tuple[str, ...]] = {
    "a": ("al",),
    "c": ("ance", "ence"),
    "e": ("er",),
    "i": ("ic",),
    "l": ("able", "ible"),
    "n": ("ant", "ement", "ment", "ent"),
    "o": ("ion", "ou"),
    "s": ("ism",),
    "t": ("ate", "iti"),
    "u": ("ous",),
    "v": ("ive",),
    "z": ("ize",),
}


class _Word:
    """Mutable working state for stemming a single word.

    ``b`` holds the characters, ``k`` is the index of the last live
    character and ``j`` marks the end of the stem in front of the suffix
    most recently matched by :meth:`ends`.
    """

    __slots__ = ("b", "k", "j")

    def __init__(self, word: str) -> None:
        self.b = list(word)
        self.k = len(word) - 1
        self.j = 0

    def result(self) -> str:
        return "".join(self.b[: self.k + 1])

    # ------------------------------------------------------------------
    # Predicates
    # ------------------------------------------------------------------

    def cons(self, i: int) -> bool:
        """True if ``b[i]`` is a consonant.

        ``y`` is a consonant at the start of a word and after a vowel. Runs
        of ``y`` alternate, so the lookback is done iteratively.
        """
        b = self.b
        flips = 0
        while b[i] == "y":
            if i == 0:
                return flips % 2 == 0
            flips += 1
            i -= 1
        consonant = b[i] not in _VOWELS
        return consonant if flips % 2 == 0 else not consonant

    def measure(self) -> int:
        """Number of vowel-consonant sequences in ``b[0..j]``.

        ``<c><v>`` gives 0, ``<c>vc<v>`` gives 1, ``<c>vcvc<v>`` gives 2.
        """
        j = self.j
        i = 0
        while i <= j and self.cons(i):
            i += 1
        n = 0
        while i <= j:
            while i <= j and not self.cons(i):
                i += 1
            if i > j:
                break
            while i <= j and self.cons(i):
                i += 1
            n += 1
        return n

    def vowel_in_stem(self) -> bool:
        return any(not self.cons(i) for i in range(self.j + 1))

    def double_consonant(self, j: int) -> bool:
        if j < 1 or self.b[j] != self.b[j - 1]:
            return False
        return self.cons(j)

    def cvc(self, i: int) -> bool:
        """True if ``b[i-2..i]`` is consonant-vowel-consonant.

        The final consonant must not be w, x or y. Used to restore an ``e``
        on short words: cav(e), lov(e), hop(e), but snow, box, tray.
        """
        if i < 2 or not self.cons(i) or self.cons(i - 1) or not self.cons(i - 2):
            return False
        return self.b[i] not in "wxy"

    def ends(self, suffix: str) -> bool:
        start = self.k - len(suffix) + 1
        if start < 0:
            return False
        if "".join(self.b[start : self.k + 1]) != suffix:
            return False
        self.j = self.k - len(suffix)
        return True

    # ------------------------------------------------------------------
    # Rewrites
    # ------------------------------------------------------------------

    def set_to(self, replacement: str) -> None:
        """Replace ``b[j+1..k]`` with ``replacement`` and readjust ``k``."""
        del self.b[self.j + 1 :]
        self.b.extend(replacement)
        self.k = self.j + len(replacement)

    def replace_if_measured(self, replacement: str) -> None:
        if self.measure() > 0:
            self.set_to(replacement)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def step1(self) -> None:
        """Remove plurals and -ed or -ing.

        caresses -> caress, ponies -> poni, cats -> cat, feed -> feed,
        agreed -> agree, matting -> mat, mating -> mate, meetings -> meet.
        """
        b = self.b
        if b[self.k] == "s":
            if self.ends("sses"):
                self.k -= 2
            elif self.ends("ies"):
                self.set_to("i")
            elif b[self.k - 1] != "s":
                self.k -= 1
        if self.ends("eed"):
            if self.measure() > 0:
                self.k -= 1
        elif (self.ends("ed") or self.ends("ing")) and self.vowel_in_stem():
            self.k = self.j
            if self.ends("at"):
                self.set_to("ate")
            elif self.ends("bl"):
                self.set_to("ble")
            elif self.ends("iz"):
                self.set_to("ize")
            elif self.double_consonant(self.k):
                self.k -= 1
                if b[self.k] in "lsz":
                    self.k += 1
            elif self.measure() == 1 and self.cvc(self.k):
                self.set_to("e")

    def step2(self) -> None:
        """Turn terminal y into i when there is another vowel in the stem."""
        if self.ends("y") and self.vowel_in_stem():
            self.b[self.k] = "i"

    def step3(self) -> None:
        if self.k == 0:
            return
        for suffix, replacement in _STEP3_RULES.get(self.b[self.k - 1], ()):
            if self.ends(suffix):
                self.replace_if_measured(replacement)
                return

    def step4(self) -> None:
        for suffix, replacement in _STEP4_RULES.get(self.b[self.k], ()):
            if self.ends(suffix):
                self.replace_if_measured(replacement)
                return

    def step5(self) -> None:
        if self.k == 0:
            return
        for suffix in _STEP5_SUFFIXES.get(self.b[self.k - 1], ()):
            if not self.ends(suffix):
                continue
            if suffix == "ion" and not (self.j >= 0 and self.b[self.j] in "st"):
                continue
            break
        else:
            return
        if self.measure() > 1:
            self.k = self.j

    def step6(self) -> None:
        """Remove a final -e and reduce -ll to -l when the measure allows."""
        self.j = self.k
        if self.b[self.k] == "e":
            m = self.measure()
            if m > 1 or (m == 1 and not self.cvc(self.k - 1)):
                self.k -= 1
        if self.b[self.k] == "l" and self.double_consonant(self.k) and self.measure() > 1:
            self.k -= 1


def stem(word: str) -> str:
    """Reduce a lowercase word to its Porter stem.

    Args:
        word: A single lowercase token.

    Returns:
        The stem. Words of length two or less are returned unchanged.
    """
    if len(word) <= 2:
        return word
    w = _Word(word)
    w.step1()
    w.step2()
    w.step3()
    w.step4()
    w.step5()
    w.step6()
    return w.result()


def strip_inflection(word: str) -> str:
    """Apply only the first Porter step (plurals, -ed, -ing).

    Useful for inspecting the inflectional stage on its own; the full
    :func:`stem` continues with the derivational steps.
    """
    if len(word) <= 2:
        return word
    w = _Word(word)
    w.step1()
    return w.result()


class PorterStemmer:
    """Callable Porter stemmer with an optional result cache.

    Review corpora repeat the same words constantly, so memoizing results
    avoids re-running the six steps for every occurrence. The cache does not
    change results: ``PorterStemmer()(w) == stem(w)`` for every ``w``.

    Args:
        cache_size: Maximum number of cached words. ``0`` disables caching,
            ``None`` means unbounded.
    """

    def __init__(self, cache_size: Optional[int] = 100_000) -> None:
        self._cache_size = cache_size
        self._cache: dict[str, str] = {}

    def __call__(self, word: str) -> str:
        return self.stem(word)

    def stem(self, word: str) -> str:
        cached = self._cache.get(word)
        if cached is not None:
            return cached
        result = stem(word)
        if self._cache_size is None or len(self._cache) < self._cache_size:
            self._cache[word] = result
        return result

    def clear_cache(self) -> None:
        self._cache.clear()

    @property
    def cache_len(self) -> int:
        return len(self._cache)
