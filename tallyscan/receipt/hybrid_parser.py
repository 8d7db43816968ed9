"""Hybrid receipt extraction: generative assistants first, rules as the floor.

Strategies run in a fixed order and the first one that produces a result
wins:

1. on-device assistant (confidence 1.0), if it reports itself available
2. cloud assistant (confidence 0.95), if configured
3. deterministic rule-based parser (computed confidence)

A failing step is logged and the next one runs; the caller always gets an
ExtractionResult back for well-typed input.
"""

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from tallyscan.domain.receipt import ExtractionResult
from tallyscan.runtime.assistants import AssistantResponseError, CloudAssistant, OnDeviceAssistant
from tallyscan.runtime.logging import get_logger

from .assistant_response import (
    build_messages,
    load_assistant_json,
    preprocess_for_assistant,
    result_from_assistant_payload,
    strip_code_fences,
)
from .ocr_result_parser import parse_receipt_lines

logger = get_logger(__name__)

ON_DEVICE_CONFIDENCE = 1.0
CLOUD_CONFIDENCE = 0.95


class ExtractionStrategy(Protocol):
    name: str

    async def attempt(self, text: str) -> ExtractionResult | None: ...


@dataclass
class OnDeviceStrategy:
    assistant: OnDeviceAssistant
    name: str = "on-device assistant"

    async def attempt(self, text: str) -> ExtractionResult | None:
        try:
            # The availability check is synchronous and may block on I/O.
            available = await asyncio.to_thread(self.assistant.is_available)
        except Exception as e:
            logger.warning("On-device availability check failed: %s", e)
            return None
        if not available:
            logger.info("On-device assistant not available")
            return None

        response = await self.assistant.generate(build_messages(preprocess_for_assistant(text)))
        entry = next((part for part in response if part.get("type") == "text"), None)
        if entry is None or not entry.get("text"):
            raise AssistantResponseError("On-device assistant returned no text content")

        data = load_assistant_json(strip_code_fences(entry["text"]))
        return result_from_assistant_payload(data, text, ON_DEVICE_CONFIDENCE, "on_device")


@dataclass
class CloudStrategy:
    assistant: CloudAssistant
    name: str = "cloud assistant"

    async def attempt(self, text: str) -> ExtractionResult | None:
        content = await self.assistant.complete_json(build_messages(preprocess_for_assistant(text)))
        data = load_assistant_json(content)
        return result_from_assistant_payload(data, text, CLOUD_CONFIDENCE, "cloud")


@dataclass
class RuleBasedStrategy:
    name: str = "rule-based parser"

    async def attempt(self, text: str) -> ExtractionResult | None:
        return parse_receipt_lines(text)


def build_strategies(
    on_device: OnDeviceAssistant | None = None,
    cloud: CloudAssistant | None = None,
) -> tuple[ExtractionStrategy, ...]:
    """Ordered strategy chain; the rule-based parser is always last."""
    strategies: list[ExtractionStrategy] = []
    if on_device is not None:
        strategies.append(OnDeviceStrategy(on_device))
    if cloud is not None:
        strategies.append(CloudStrategy(cloud))
    else:
        logger.debug("No cloud assistant configured; skipping cloud fallback")
    strategies.append(RuleBasedStrategy())
    return tuple(strategies)


async def run_strategies(text: str, strategies: Sequence[ExtractionStrategy]) -> ExtractionResult:
    for strategy in strategies:
        try:
            result = await strategy.attempt(text)
        except Exception as e:
            logger.warning("%s failed, falling back: %s", strategy.name, e)
            continue
        if result is not None:
            logger.info(
                "Parsed receipt with %s: %d items, confidence=%.2f",
                strategy.name,
                len(result.items),
                result.confidence,
            )
            return result

    logger.warning("All extraction strategies failed; returning empty result")
    return ExtractionResult.empty(text)


async def parse_receipt_text(
    text: str,
    *,
    on_device: OnDeviceAssistant | None = None,
    cloud: CloudAssistant | None = None,
) -> ExtractionResult:
    """
    Extract a structured receipt from stitched OCR text.

    Args:
        text: Multi-line receipt text
        on_device: Optional on-device assistant, tried first
        cloud: Optional cloud assistant, tried second

    Returns:
        ExtractionResult; ``raw_text`` is always ``text`` verbatim

    Raises:
        TypeError: If ``text`` is not a string
    """
    if not isinstance(text, str):
        raise TypeError(f"Receipt text must be str, got {type(text).__name__}")

    if not text.strip():
        return ExtractionResult.empty(text)

    return await run_strategies(text, build_strategies(on_device, cloud))


def parse_receipt_text_sync(
    text: str,
    *,
    on_device: OnDeviceAssistant | None = None,
    cloud: CloudAssistant | None = None,
) -> ExtractionResult:
    """Blocking wrapper around parse_receipt_text for synchronous callers."""
    return asyncio.run(parse_receipt_text(text, on_device=on_device, cloud=cloud))
