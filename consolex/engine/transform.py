"""
Single-file transformation: parse -> match -> rewrite -> generate -> verify.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Tuple

from .context import ProcessingContext
from .dialect import Dialect
from .matcher import CallSiteMatcher, DEFAULT_RECEIVER
from .parser import parse_source
from .rewriter import ContextAwareRewriter
from ..errors import GenerationError, ParseError
from ..types import TransformResult

logger = logging.getLogger(__name__)


def normalize_targets(target_names: Iterable[str]) -> Tuple[str, ...]:
    """Ordered, de-duplicated target names; blank entries are dropped."""
    seen = []
    for name in target_names:
        name = name.strip()
        if name and name not in seen:
            seen.append(name)
    return tuple(seen)


def remove_calls(
    text: str,
    target_names: Iterable[str],
    *,
    dialect: Optional[Dialect] = None,
    ext: Optional[str] = None,
    receiver: str = DEFAULT_RECEIVER,
    verify: bool = True,
) -> TransformResult:
    """
    Remove `<receiver>.<member>(...)` calls for every member in target_names.

    Args:
        text: Source text of one file
        target_names: Member names to remove ("log", "warn", ...)
        dialect: Explicit dialect; guessed from ext (with fallbacks) when omitted
        ext: File extension used to guess the dialect
        receiver: Global object whose members are removed
        verify: Re-parse the output and check that no matched call survived

    Returns:
        TransformResult; output_text is the input itself when nothing matched

    Raises:
        ParseError: If the input cannot be parsed
        GenerationError: If the produced output violates an engine invariant
    """
    targets = normalize_targets(target_names)
    if not targets:
        return TransformResult(output_text=text, modified=False, removed_count=0)

    doc = parse_source(text, dialect=dialect, ext=ext)
    context = ProcessingContext.from_document(doc)
    matcher = CallSiteMatcher(targets, receiver)
    rewriter = ContextAwareRewriter(matcher)

    sites = rewriter.apply(context)
    if not sites:
        return TransformResult(output_text=text, modified=False, removed_count=0, source_type=doc.source_type)

    logger.debug("planned edits: %s", context.editor.get_edit_summary())
    try:
        output, stats = context.editor.apply_edits()
    except ValueError as e:
        raise GenerationError("cannot apply edits", str(e)) from e

    logger.debug("applied edits: %s; metrics: %s", stats, context.metrics.to_dict())
    if verify:
        _verify_output(output, doc.dialect, rewriter)

    return TransformResult(
        output_text=output,
        modified=True,
        removed_count=context.metrics.removed_count,
        removed_by_member=context.metrics.removed_by_member(),
        source_type=doc.source_type,
    )


def _verify_output(output: str, dialect: Dialect, rewriter: ContextAwareRewriter) -> None:
    """
    The output must parse under the dialect of the input and must not contain
    a call the matcher still accepts.
    """
    try:
        doc = parse_source(output, dialect=dialect)
    except ParseError as e:
        raise GenerationError("output is not valid source", str(e)) from e

    leftovers = rewriter.collect(doc)
    if leftovers:
        site = leftovers[0]
        raise GenerationError(
            "matched call survived removal",
            f"{rewriter.matcher.receiver}.{site.member} at line {site.call.start_point[0] + 1}",
        )


__all__ = ["remove_calls", "normalize_targets"]
