"""Chunked, cancellable import of designs.

:meth:`ImportPipeline.iter_import` does the work as a generator: it
processes at most ``batch_size`` objects, yields the batch, and re-checks
the cancellation token when resumed. Each ``yield`` is a cooperative yield
point; :meth:`ImportPipeline.run` and :meth:`ImportPipeline.run_async`
drive the generator for synchronous and asyncio hosts.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, List, Optional

import structlog

from curve_ir.schema import PathObject, Style, create_path_object, create_placeholder_points
from svg_codec.commands import ParseError
from svg_codec.document import SvgShape
from svg_codec.parser import InsufficientGeometryError, parse_path

from .cancellation import CancellationToken
from .config import ImportConfig
from .detect import FORMAT_SVG_DOCUMENT, FORMAT_SVG_PATH, FormatError, detect_format
from .repair import ValidationRepaired, clamp_points, repair_object

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ImportProgress:
    percent: float
    processed: int
    total: int
    batch_index: int


@dataclass
class ImportBatch:
    """Objects produced by one batch, in payload order."""

    index: int
    objects: List[PathObject]
    progress: ImportProgress


@dataclass(frozen=True)
class SkippedShape:
    index: int
    name: Optional[str]
    reason: str


@dataclass
class ImportResult:
    """Everything an import produced.

    ``cancelled`` is set when the caller cancelled; ``objects`` then holds
    what was delivered before cancellation.
    """

    objects: List[PathObject] = field(default_factory=list)
    format: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
    repairs: List[ValidationRepaired] = field(default_factory=list)
    skipped: List[SkippedShape] = field(default_factory=list)
    cancelled: bool = False


ProgressCallback = Callable[[ImportProgress], None]
BatchCallback = Callable[[ImportBatch], None]
CompleteCallback = Callable[[ImportResult], None]
ErrorCallback = Callable[[Exception], None]


class ImportPipeline:
    """Detects, repairs and converts import payloads in batches."""

    def __init__(self, config: Optional[ImportConfig] = None):
        self.config = config or ImportConfig()

    def _object_from_points(
        self, points, index: int, name: Optional[str], style: Optional[Style], result: ImportResult
    ) -> PathObject:
        points = clamp_points(
            points, self.config.max_points_per_object, index, result.repairs, result.warnings
        )
        return create_path_object(
            name or f"Imported Object {index + 1}",
            points=points,
            styles=[style] if style is not None else None,
        )

    def _convert_item(self, fmt: str, item: Any, index: int, result: ImportResult) -> PathObject:
        """Convert one payload item; raises for shapes that cannot be used."""
        if fmt == FORMAT_SVG_PATH:
            parsed = parse_path(item, self.config.parser)
            result.warnings.extend(f"Object {index + 1}: {w}" for w in parsed.warnings)
            return self._object_from_points(parsed.points, index, None, None, result)

        if fmt == FORMAT_SVG_DOCUMENT:
            shape: SvgShape = item
            if shape.has_metadata:
                obj = repair_object(shape.to_raw_object(), index, self.config, result.repairs, result.warnings)
                if obj.is_renderable or not shape.path_data:
                    return self._require_renderable(obj)
            parsed = parse_path(shape.path_data, self.config.parser)
            result.warnings.extend(f"Object {index + 1}: {w}" for w in parsed.warnings)
            return self._object_from_points(parsed.points, index, shape.name, shape.style, result)

        obj = repair_object(item, index, self.config, result.repairs, result.warnings)
        return self._require_renderable(obj)

    @staticmethod
    def _require_renderable(obj: PathObject) -> PathObject:
        if not obj.is_renderable:
            raise InsufficientGeometryError(obj.points)
        return obj

    def _process_item(self, fmt: str, item: Any, index: int, result: ImportResult) -> Optional[PathObject]:
        try:
            return self._convert_item(fmt, item, index, result)
        except (ParseError, InsufficientGeometryError, ValueError) as e:
            name = getattr(item, "name", None) if not isinstance(item, dict) else item.get("name")
            logger.warning("Skipped shape", index=index, error=str(e), error_type=type(e).__name__)

            if self.config.substitute_placeholder:
                result.warnings.append(f"Object {index + 1} replaced with a placeholder: {e}")
                return create_path_object(
                    name or f"Imported Object {index + 1}",
                    points=create_placeholder_points(index),
                )

            result.skipped.append(SkippedShape(index, name, str(e)))
            return None

    def iter_import(
        self,
        payload: Any,
        token: Optional[CancellationToken] = None,
        result: Optional[ImportResult] = None,
    ) -> Iterator[ImportBatch]:
        """Import ``payload`` one batch at a time.

        Args:
            payload: Object list, Design, JSON text, SVG document or path data
            token: Checked before every batch; once cancelled nothing more is
                produced
            result: Accumulator for objects, warnings and records (a new one
                is used when omitted)

        Yields:
            ImportBatch after each batch of at most ``batch_size`` objects. An
            empty payload yields one empty batch.

        Raises:
            FormatError: If the payload format cannot be determined
        """
        token = token or CancellationToken()
        result = result if result is not None else ImportResult()

        detected = detect_format(payload)
        result.format = detected.format
        items = detected.items

        limit = self.config.max_objects
        if len(items) > limit:
            message = f"Import limited to {limit} of {len(items)} objects"
            result.warnings.append(message)
            logger.warning("Object limit reached", kept=limit, total=len(items))
            items = items[:limit]

        total = len(items)
        size = self.config.batch_size
        starts = range(0, total, size) if total else [0]

        for batch_index, start in enumerate(starts):
            if token.is_cancelled:
                result.cancelled = True
                return

            objects = []
            for offset, item in enumerate(items[start:start + size]):
                obj = self._process_item(detected.format, item, start + offset, result)
                if obj is not None:
                    objects.append(obj)
            result.objects.extend(objects)

            processed = min(start + size, total)
            progress = ImportProgress(
                percent=100.0 if total == 0 else processed * 100.0 / total,
                processed=processed,
                total=total,
                batch_index=batch_index,
            )
            yield ImportBatch(batch_index, objects, progress)

        if token.is_cancelled:
            result.cancelled = True

    def _deliver(
        self,
        batch: ImportBatch,
        token: CancellationToken,
        on_batch: Optional[BatchCallback],
        on_progress: Optional[ProgressCallback],
    ) -> bool:
        """Fire the callbacks for one batch; False once cancelled."""
        if token.is_cancelled:
            return False
        if on_batch is not None:
            on_batch(batch)
        if token.is_cancelled:
            return False
        if on_progress is not None:
            on_progress(batch.progress)
        return True

    def _finish(
        self,
        result: ImportResult,
        token: CancellationToken,
        on_complete: Optional[CompleteCallback],
    ) -> ImportResult:
        if token.is_cancelled:
            result.cancelled = True
            logger.info("Import cancelled", delivered=len(result.objects))
            return result

        logger.info(
            "Import complete",
            format=result.format,
            objects=len(result.objects),
            skipped=len(result.skipped),
            repairs=len(result.repairs),
            warnings=len(result.warnings),
        )
        if on_complete is not None:
            on_complete(result)
        return result

    def _fail(self, error: FormatError, on_error: Optional[ErrorCallback]) -> None:
        logger.error("Import failed", error=str(error))
        if on_error is None:
            raise error
        on_error(error)

    def run(
        self,
        payload: Any,
        token: Optional[CancellationToken] = None,
        *,
        on_progress: Optional[ProgressCallback] = None,
        on_batch: Optional[BatchCallback] = None,
        on_complete: Optional[CompleteCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        scheduler: Optional[Callable[[], None]] = None,
    ) -> Optional[ImportResult]:
        """Drive an import to the end on the calling thread.

        ``scheduler`` is called between batches so the host can service
        other work; it may cancel ``token``.

        Returns:
            The ImportResult, or None after a format error reported to
            ``on_error``

        Raises:
            FormatError: If the payload is unrecognized and no ``on_error``
                callback was given
        """
        token = token or CancellationToken()
        result = ImportResult()
        batches = self.iter_import(payload, token, result)

        try:
            for batch in batches:
                if not self._deliver(batch, token, on_batch, on_progress):
                    break
                if scheduler is not None:
                    scheduler()
        except FormatError as e:
            self._fail(e, on_error)
            return None
        finally:
            batches.close()

        return self._finish(result, token, on_complete)

    async def run_async(
        self,
        payload: Any,
        token: Optional[CancellationToken] = None,
        *,
        on_progress: Optional[ProgressCallback] = None,
        on_batch: Optional[BatchCallback] = None,
        on_complete: Optional[CompleteCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> Optional[ImportResult]:
        """Like :meth:`run`, yielding to the event loop between batches."""
        token = token or CancellationToken()
        result = ImportResult()
        batches = self.iter_import(payload, token, result)

        try:
            for batch in batches:
                if not self._deliver(batch, token, on_batch, on_progress):
                    break
                await asyncio.sleep(0)
        except FormatError as e:
            self._fail(e, on_error)
            return None
        finally:
            batches.close()

        return self._finish(result, token, on_complete)


def import_payload(payload: Any, config: Optional[ImportConfig] = None) -> ImportResult:
    """Import everything at once; raises FormatError for unknown payloads."""
    return ImportPipeline(config).run(payload)
