# stepdriver/backends/text.py
"""
@file text.py
@brief Locate regions by recognized on-screen text (Tesseract OCR).

Same nested-region option as the visual backend: parameter1 is SCREEN or a
search-region image located by template matching first; parameter2 is the
phrase. A phrase matches a run of consecutive words on one recognized
line; the element region is the union of those word boxes.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Tuple

import pytesseract
from PIL import Image

from ..config import Settings
from ..context import SearchContext
from ..element import ElementFactory
from ..exceptions import SearchRegionNotFoundError, TextNotFoundError
from ..geometry import Region
from ..interfaces import IScreen
from ..locators import LocatorSpec, is_screen
from ..results import SearchResult
from .visual import VisualBackend, match_template, to_bgr

OcrEngine = Callable[[Image.Image], Dict[str, List[Any]]]
Word = Tuple[str, Region]


def tesseract_words(image: Image.Image) -> Dict[str, List[Any]]:
    """Run Tesseract and return its word table as a dict of columns."""
    return pytesseract.image_to_data(image, output_type=pytesseract.Output.DICT)


def group_lines(data: Dict[str, List[Any]], min_confidence: float = 0.0) -> List[List[Word]]:
    """
    Group an image_to_data word table into lines of (text, box) words.

    Lines are keyed by (block_num, par_num, line_num) and kept in the order
    Tesseract reports them.
    """
    lines: Dict[Tuple[int, int, int], List[Word]] = {}
    for i, raw in enumerate(data.get("text", [])):
        text = str(raw or "").strip()
        if not text:
            continue
        conf = float(data["conf"][i])
        if conf >= 0 and conf / 100.0 < min_confidence:
            continue
        key = (int(data["block_num"][i]), int(data["par_num"][i]), int(data["line_num"][i]))
        box = Region(int(data["left"][i]), int(data["top"][i]), int(data["width"][i]), int(data["height"][i]))
        lines.setdefault(key, []).append((text, box))
    return list(lines.values())


def _union(boxes: List[Region]) -> Region:
    left = min(b.x for b in boxes)
    top = min(b.y for b in boxes)
    right = max(b.right for b in boxes)
    bottom = max(b.bottom for b in boxes)
    return Region(left, top, right - left, bottom - top)


def find_phrase(lines: List[List[Word]], phrase: str) -> List[Region]:
    """Return a box for each shortest run of words whose joined text contains phrase."""
    needle = phrase.strip()
    if not needle:
        return []
    hits: List[Region] = []
    for words in lines:
        start = 0
        while start < len(words):
            joined = ""
            matched_end: Optional[int] = None
            for end in range(start, len(words)):
                joined = f"{joined} {words[end][0]}" if joined else words[end][0]
                if needle in joined:
                    matched_end = end
                    break
            if matched_end is None:
                break
            first = start
            while first < matched_end and needle in " ".join(w for w, _ in words[first + 1:matched_end + 1]):
                first += 1
            hits.append(_union([box for _, box in words[first:matched_end + 1]]))
            start = matched_end + 1
    return hits


class TextBackend(VisualBackend):
    name = "text"

    def __init__(
        self,
        screen: IScreen,
        factory: ElementFactory,
        settings: Settings,
        ocr: Optional[OcrEngine] = None,
        min_confidence: float = 0.0,
        retry_interval: float = 0.1,
    ):
        super().__init__(screen, factory, settings, retry_interval=retry_interval)
        self.ocr = ocr or tesseract_words
        self.min_confidence = float(min_confidence)

    def _locate(self, spec: LocatorSpec, context: SearchContext, limit: Optional[int]) -> SearchResult:
        area = self._search_area(context)
        capture = self.screen.grab(area)
        origin = area

        if not is_screen(spec.parameter1):
            hits = match_template(
                to_bgr(capture), self._load(spec.parameter1), self.settings.image_similarity, limit=1
            )
            if not hits:
                return SearchResult.not_found(error=SearchRegionNotFoundError(spec.parameter1))
            inner, _ = hits[0]
            capture = capture.crop(inner.as_box())
            origin = inner.offset(area.x, area.y)

        boxes = find_phrase(group_lines(self.ocr(capture), self.min_confidence), spec.parameter2)
        if not boxes:
            within = "SCREEN" if is_screen(spec.parameter1) else spec.parameter1
            return SearchResult.not_found(error=TextNotFoundError(spec.parameter2, within=within))
        if limit:
            boxes = boxes[:limit]
        elements = [self.factory.region(box.offset(origin.x, origin.y), source=str(spec)) for box in boxes]
        return SearchResult.found(*elements)
