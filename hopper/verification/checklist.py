"""
Test checklist generation.

A ChecklistGenerator turns a summary's deliverables into manual test
instructions. Real generators call out to a text-generation service; the
payload they return is untrusted and is validated here before anything
reaches the session layer.

Any generator failure degrades to one "Verify: <accomplishment>" item per
accomplishment. A valid empty payload is not a failure: it means there is
nothing to test, so no session is started. Cancellation propagates, and
since the session is only created after the checklist exists, nothing is
persisted.
"""

import json
import logging
import re
from typing import Any, List, Optional, Union

from hopper.documents.summary_md import Deliverables
from hopper.errors import ParseFailure
from hopper.models.uat import VerificationSession

logger = logging.getLogger(__name__)

JSON_ARRAY = re.compile(r"\[[\s\S]*\]")

MAX_PROMPT_FILES = 10


class ChecklistGenerator:
    """Produces test instructions for a plan's deliverables.

    generate() is a coroutine returning either a list of strings or raw
    text holding a JSON array of strings.
    """

    async def generate(self, accomplishments: List[str], files: List[str], plan_name: str) -> Union[str, List[str]]:
        raise NotImplementedError


class FallbackGenerator(ChecklistGenerator):
    """Generator used when no text-generation service is configured."""

    async def generate(self, accomplishments: List[str], files: List[str], plan_name: str) -> List[str]:
        return fallback_checklist(accomplishments)


def fallback_checklist(accomplishments: List[str]) -> List[str]:
    return [f"Verify: {a}" for a in accomplishments if a.strip()]


def build_prompt(deliverables: Deliverables, plan_name: str) -> str:
    """Prompt text for a text-generation backed generator."""
    accomplishments = "\n".join(f"- {a}" for a in deliverables.accomplishments)
    files = "\n".join(f"- {f}" for f in deliverables.files[:MAX_PROMPT_FILES])
    return (
        "Write manual acceptance test instructions for these deliverables.\n\n"
        f"**Plan:** {plan_name}\n"
        f"**Accomplishments:**\n{accomplishments}\n\n"
        f"**Files changed:**\n{files}\n\n"
        "Give 3-8 tests. Each says what to do, how to do it, and what the "
        "expected result is.\n\n"
        "Respond with a JSON array of strings only."
    )


def parse_checklist_payload(payload: Any) -> List[str]:
    """Validate a generator payload into a list of test items.

    Accepts a list of strings, or text containing a JSON array of strings
    (surrounding prose is ignored).

    Raises:
        ParseFailure: payload has no JSON array, or it holds non-strings
    """
    if isinstance(payload, str):
        match = JSON_ARRAY.search(payload)
        if not match:
            raise ParseFailure("No JSON array in checklist payload", payload=payload)
        try:
            payload = json.loads(match.group(0))
        except json.JSONDecodeError as e:
            raise ParseFailure(f"Invalid JSON in checklist payload: {e}", payload=match.group(0))

    if not isinstance(payload, list):
        raise ParseFailure(f"Checklist payload is {type(payload).__name__}, not a list")

    bad = [item for item in payload if not isinstance(item, str)]
    if bad:
        raise ParseFailure(f"Checklist payload has {len(bad)} non-string items")

    return [item.strip() for item in payload if item.strip()]


async def build_checklist(
    generator: Optional[ChecklistGenerator],
    deliverables: Deliverables,
    plan_name: str,
) -> List[str]:
    """Await the generator and validate its payload, falling back on failure."""
    if generator is None:
        return fallback_checklist(deliverables.accomplishments)

    try:
        payload = await generator.generate(
            list(deliverables.accomplishments),
            list(deliverables.files),
            plan_name,
        )
        items = parse_checklist_payload(payload)
    except ParseFailure as e:
        logger.warning(f"Checklist payload rejected for {plan_name}: {e.message}")
        return fallback_checklist(deliverables.accomplishments)
    except Exception as e:
        logger.warning(f"Checklist generator failed for {plan_name}: {e}")
        return fallback_checklist(deliverables.accomplishments)

    if not items:
        logger.info(f"Checklist generator returned no items for {plan_name}")
    return items


async def begin_verification(
    service,
    generator: Optional[ChecklistGenerator],
    deliverables: Deliverables,
    key: str,
    plan_path: str = "",
    phase: str = "",
    plan: str = "",
) -> Optional[VerificationSession]:
    """Build the checklist, then start (or resume) the session.

    An existing session is resumed without calling the generator. Returns
    None when there is nothing to test.
    """
    existing = service.store.load(key)
    if existing is not None:
        return existing

    plan_name = f"{phase}-{plan}" if phase and plan else plan_path
    items = await build_checklist(generator, deliverables, plan_name)
    return service.start_verification(items, key, plan_path=plan_path, phase=phase, plan=plan)
