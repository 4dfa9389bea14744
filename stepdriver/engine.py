# stepdriver/engine.py
"""
@file engine.py
@brief Wire settings, seams, backends, finder, actions and dispatcher together.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .actions import Actions
from .backends import LocationBackend, TextBackend, TreeBackend, VisualBackend
from .backends.text import OcrEngine
from .config import Settings
from .context import SearchContext
from .element import ElementFactory
from .eventhub import EventHub
from .finder import ElementFinder
from .interfaces import ICapabilityPort, IScreen, ITreeSource
from .registry import ActionRegistry, build_registry
from .runner import Dispatcher


@dataclass
class Engine:
    settings: Settings
    context: SearchContext
    finder: ElementFinder
    actions: Actions
    registry: ActionRegistry
    dispatcher: Dispatcher


def build_engine(
    settings: Settings,
    port: ICapabilityPort,
    screen: IScreen,
    tree_source: ITreeSource,
    ocr: Optional[OcrEngine] = None,
    sink: Optional[EventHub] = None,
) -> Engine:
    """
    @param ocr Optional OCR callable (defaults to Tesseract via pytesseract)
    @param sink Optional reporting sink (defaults to the process EVENT_HUB)
    """
    context = SearchContext(backend_retry_attempts=settings.backend_retry_attempts)
    factory = ElementFactory(port, screen, scale=settings.scale, write_pause=settings.write_pause)
    interval = settings.backend_retry_interval
    finder = ElementFinder(
        settings,
        context,
        tree=TreeBackend(tree_source, factory, retry_interval=interval),
        visual=VisualBackend(screen, factory, settings, retry_interval=interval),
        text=TextBackend(screen, factory, settings, ocr=ocr, retry_interval=interval),
        location=LocationBackend(screen, factory, retry_interval=interval),
    )
    actions = Actions(finder, port, settings, context)
    registry = build_registry(actions)
    dispatcher = Dispatcher(registry, actions, settings, port, sink=sink)
    return Engine(settings, context, finder, actions, registry, dispatcher)
