"""Turkish text normalization: lowercasing, character cleanup, typo correction."""

import hashlib
import re
from typing import Dict, List, Sequence, Tuple

from yanit.exceptions import NormalizationTableError

# Misspellings and informal forms -> canonical forms. Keys are single words;
# every value must already be a normalization fixed point (checked below).
TURKISH_TYPO_CORRECTIONS: Tuple[Tuple[str, str], ...] = (
    # Password
    ("sifre", "şifre"),
    ("sifremi", "şifremi"),
    ("sifreyi", "şifreyi"),
    ("sifreni", "şifreni"),
    # Login / access
    ("giris", "giriş"),
    ("girisi", "girişi"),
    ("girise", "girişe"),
    ("cikis", "çıkış"),
    # Forgot
    ("unutdum", "unuttum"),
    ("unutdun", "unuttun"),
    ("unutmus", "unutmuş"),
    # SMS / message
    ("gelmiyo", "gelmiyor"),
    ("gonder", "gönder"),
    # QR code
    ("okutunca", "okuturken"),
    ("okuttuğumda", "okuturken"),
    ("okuttugumda", "okuturken"),
    # Verification
    ("dogrulama", "doğrulama"),
    ("dogrulanamadi", "doğrulanamadı"),
    # Shift
    ("vardiyami", "vardiyamı"),
    ("vardiyayi", "vardiyayı"),
    # Change / update
    ("degistir", "değiştir"),
    ("degisiklik", "değişiklik"),
    ("guncelle", "güncelle"),
    # Error / problem
    ("hatasi", "hatası"),
    # Invalid
    ("gecersiz", "geçersiz"),
    # User
    ("kullanici", "kullanıcı"),
    # Find / search
    ("bulunmadi", "bulunmadı"),
    ("bulunamadi", "bulunamadı"),
    ("bulamiyorum", "bulamıyorum"),
    # See / view
    ("goremiyorum", "göremiyorum"),
    ("gorunte", "görüntüle"),
    # Do / make
    ("yapamiyorum", "yapamıyorum"),
    ("napcam", "ne yapacağım"),
    ("napcaz", "ne yapacağız"),
    # Open / work
    ("acilmiyor", "açılmıyor"),
    ("calismiyor", "çalışmıyor"),
    ("calisiyor", "çalışıyor"),
    # Module names
    ("buradayim", "buradayım"),
    # Common words
    ("icin", "için"),
    ("nasil", "nasıl"),
    ("nicin", "niçin"),
)

CACHE_KEY_PREFIX = "emb:"
_CACHE_KEY_SLICE = 20

_WHITESPACE = re.compile(r"\s+")
_DISALLOWED = re.compile(r"[^a-zçğıöşüâîû0-9 ?]")
_SINGLE_WORD = re.compile(r"^\w+$")
_TURKISH_CHARS = re.compile(r"[çğıöşüÇĞİÖŞÜ]")


def _canonicalize(text: str) -> str:
    """Steps 1-3: lowercase, collapse whitespace, drop foreign characters."""
    # str.lower() turns "İ" into "i" + U+0307; fold it first
    text = text.replace("İ", "i").lower().replace("\u0307", "").strip()
    text = _WHITESPACE.sub(" ", text)
    return _DISALLOWED.sub(" ", text)


def _collapse(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


class TypoCorrector:
    """Whole-word typo correction against an immutable table.

    All words are looked up in a single regex pass, so a replacement is never
    fed back into the table. The table is validated on construction: keys must
    be single canonical words and every replacement must be left unchanged by
    a full normalization pass.

    Args:
        corrections: ``(misspelling, canonical)`` pairs.

    Raises:
        NormalizationTableError: If the table is not closed under normalization.
    """

    def __init__(self, corrections: Sequence[Tuple[str, str]]):
        self._mapping: Dict[str, str] = {}
        for typo, correct in corrections:
            if typo != _collapse(_canonicalize(typo)) or not _SINGLE_WORD.match(typo):
                raise NormalizationTableError(
                    f"Typo key '{typo}' is not a single normalized word"
                )
            if typo in self._mapping and self._mapping[typo] != correct:
                raise NormalizationTableError(f"Conflicting corrections for '{typo}'")
            self._mapping[typo] = correct

        # No re.IGNORECASE: input is already lowercased, and Python's
        # case folding equates "i" with dotless "ı".
        alternatives = sorted(self._mapping, key=len, reverse=True)
        self._pattern = (
            re.compile(r"\b(?:" + "|".join(re.escape(a) for a in alternatives) + r")\b")
            if alternatives
            else None
        )

        for typo, correct in self._mapping.items():
            if _collapse(self.apply(_canonicalize(correct))) != correct:
                raise NormalizationTableError(
                    f"Replacement '{correct}' for '{typo}' is not a normalization fixed point"
                )

    def __len__(self) -> int:
        return len(self._mapping)

    def apply(self, text: str) -> str:
        if self._pattern is None:
            return text
        return self._pattern.sub(lambda m: self._mapping[m.group(0)], text)


DEFAULT_CORRECTOR = TypoCorrector(TURKISH_TYPO_CORRECTIONS)


def normalize_question(text: object, corrector: TypoCorrector | None = None) -> str:
    """Normalize a Turkish question into canonical form.

    Steps:
        1. Lowercase and trim.
        2. Collapse whitespace runs.
        3. Replace characters outside the Turkish alphabet, digits, space and
           ``?`` with a space.
        4. Whole-word typo correction.
        5. Collapse whitespace again.

    Args:
        text: Raw user input. Anything that is not a ``str`` yields ``""``.
        corrector: Typo table to apply. Defaults to the built-in Turkish table.

    Returns:
        Normalized string; ``normalize_question`` of the result is the result.
    """
    if not isinstance(text, str) or not text:
        return ""
    corrector = corrector or DEFAULT_CORRECTOR
    return _collapse(corrector.apply(_canonicalize(text)))


def question_hash(normalized: str) -> str:
    """Return the MD5 hex digest of an already normalized question."""
    return hashlib.md5(normalized.encode("utf-8")).hexdigest()


def cache_key(normalized: str, prefix: str = CACHE_KEY_PREFIX) -> str:
    """Build the embedding cache key for a normalized question.

    The trailing text slice only narrows hash collisions; two inputs with the
    same normalized form always share a key.
    """
    return f"{prefix}{question_hash(normalized)}:{normalized[:_CACHE_KEY_SLICE]}"


def text_variations(text: str) -> List[str]:
    """Return the normalized text plus its variant without question marks."""
    normalized = normalize_question(text)
    variations = [normalized]
    without_question = _collapse(normalized.replace("?", ""))
    if without_question != normalized:
        variations.append(without_question)
    return variations


def text_similarity(text1: str, text2: str) -> float:
    """Word-set Jaccard similarity of two texts after normalization.

    Identical normalized forms score 1.0; words of two characters or fewer
    are ignored.
    """
    norm1 = normalize_question(text1)
    norm2 = normalize_question(text2)
    if norm1 == norm2:
        return 1.0

    words1 = {w for w in norm1.split(" ") if len(w) > 2}
    words2 = {w for w in norm2.split(" ") if len(w) > 2}
    union = words1 | words2
    if not union:
        return 0.0
    return len(words1 & words2) / len(union)


def has_turkish_characters(text: str) -> bool:
    """Whether *text* contains any Turkish-specific letter."""
    return bool(_TURKISH_CHARS.search(text))
