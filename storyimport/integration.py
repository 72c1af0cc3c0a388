#!/usr/bin/env python3
"""
# Storyimport
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

integration.py

Orchestrate the full import of Storyline-style packages.

Pipeline per file (strict order, nothing shared between files):
  1. archive.load_archive         -> manifest text (or None)
  2. extractor.extract_content    -> IntermediateContent
  3. classifier.detect_template_type
  4. converters.convert_to_template
  5. validation.validate + optimize

The service then records a ProcessedFile and hands the document to the
injected collaborators:
- a template registry, told which template type now needs a handler
- an activity store, given the document for persistence

Collaborator failures are reported as IntegrationError and never undo a
successful conversion. The service owns its bookkeeping (processed_files,
conversion_history); there is no module-level state, so independent
instances never see each other's results.

Usage:
    from storyimport.integration import ConversionService

    service = ConversionService(template_registry=registry, activity_store=store)
    processed = service.process_file(data, "Quiz.story", "application/zip")
    print(service.export_processed_file(processed.id, "csv"))
"""

from __future__ import annotations

import threading
import uuid
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol, Union

from storyimport.archive import is_storyline_file, load_archive
from storyimport.classifier import detect_template_type
from storyimport.config import DEFAULT_HISTORY_LIMIT, ImportConfig
from storyimport.converters import convert_to_template
from storyimport.errors import IntegrationError, ProcessedFileNotFound, UnsupportedFormat
from storyimport.exporters import export_document
from storyimport.extractor import extract_content
from storyimport.icons import ERROR, SUCCESS, WARNING
from storyimport.models import (
    BatchFailure,
    BatchResult,
    InputFile,
    ParseResult,
    ProcessedFile,
    ProcessingStatus,
    TemplateType,
)
from storyimport.text_utils import sanitize_filename
from storyimport.validation import optimize, validate


# ============================================================================
# Collaborator Interfaces
# ============================================================================

class TemplateRegistry(Protocol):
    """Receives template types that need a renderable handler."""

    def is_registered(self, template_type: str) -> bool: ...

    def register(self, template_type: str, constructor_hint: Dict[str, Any]) -> None: ...


class ActivityStore(Protocol):
    """Persists converted documents."""

    def save_activity(self, document: Dict[str, Any]) -> Any: ...


def template_constructor_hint(template_type: TemplateType) -> Dict[str, Any]:
    """Handler lookup hint passed to the registry alongside the type tag."""
    return {
        "handler": f"{template_type.value}-template",
        "autoInitialize": False,
        "lazyLoad": True,
    }


def generate_id() -> str:
    return uuid.uuid4().hex


def get_conversion_summary(processed: ProcessedFile) -> Dict[str, Any]:
    """Counts suitable for a one-line report of a conversion."""
    data = processed.converted_data
    item_count = 0
    for key in ("questions", "items", "cards"):
        if isinstance(data.get(key), list):
            item_count = len(data[key])
            break

    analysis = processed.parse_result.analysis
    return {
        "originalFile": processed.original_file_name,
        "templateType": processed.template_type.value,
        "fileSize": processed.original_file_size,
        "questionCount": item_count,
        "slideCount": analysis.slide_count,
        "mediaCount": analysis.media_count,
        "conversionSuccess": processed.status == ProcessingStatus.CONVERTED,
    }


# ============================================================================
# Conversion Service
# ============================================================================

class ConversionService:
    """
    Runs the import pipeline and keeps the results of this instance's runs.

    Writes to processed_files / conversion_history are serialised with a
    lock; the pipeline stages themselves touch no shared state.
    """

    def __init__(
        self,
        template_registry: Optional[TemplateRegistry] = None,
        activity_store: Optional[ActivityStore] = None,
        config: Optional[ImportConfig] = None,
    ):
        self.config = config or ImportConfig()
        self.template_registry = template_registry
        self.activity_store = activity_store

        self.processed_files: Dict[str, ProcessedFile] = {}  # id -> processed file
        self.conversion_history: List[ProcessedFile] = []    # append-only
        self.integration_errors: List[IntegrationError] = []

        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def parse_file(self, data: bytes, name: str, mime_type: str = "") -> ParseResult:
        """
        Run stages 1-5 for one file without recording anything.

        Raises:
            UnsupportedFormat: Upload fails the archive sniff test
            InvalidArchive: Container cannot be opened
            XmlParseError: Manifest markup is malformed
        """
        if not is_storyline_file(name, mime_type):
            raise UnsupportedFormat(
                f"Invalid Storyline file format: {name}",
                suggestion="Upload a .story or .zip package",
                context={"file_name": name, "mime_type": mime_type},
            )

        archive = load_archive(data)
        if archive.manifest_path is None:
            print(f"[storyimport:warn] {WARNING} No story manifest found in {name}")

        content = extract_content(archive.manifest_text, archive.files)
        template_type = detect_template_type(content, self.config.thresholds)

        document = convert_to_template(
            content,
            template_type,
            package_root=self.config.package_root,
            package_name=sanitize_filename(Path(name).stem),
        )

        validation = validate(document, template_type)
        if not validation.valid:
            for message in validation.errors:
                print(f"[storyimport:warn] {WARNING} {name}: {message}")

        return ParseResult(
            template_type=template_type,
            data=optimize(document, template_type),
            original_file=name,
            file_size=len(data),
            content=content,
            validation=validation,
        )

    def _record(self, parse_result: ParseResult) -> ProcessedFile:
        processed = ProcessedFile(
            id=generate_id(),
            original_file_name=parse_result.original_file,
            original_file_size=parse_result.file_size,
            template_type=parse_result.template_type,
            converted_data=parse_result.data,
            parse_result=parse_result,
            processed_at=datetime.now(timezone.utc),
            status=ProcessingStatus.CONVERTED,
        )

        with self._lock:
            self.processed_files[processed.id] = processed
            self.conversion_history.append(processed)

        print(f"[storyimport] {SUCCESS} Converted {processed.original_file_name} "
              f"as {processed.template_type.value}")
        return processed

    def process_file(self, data: bytes, name: str, mime_type: str = "") -> ProcessedFile:
        """
        Convert one package, record it, and notify collaborators.

        Raises:
            UnsupportedFormat, InvalidArchive, XmlParseError
        """
        parse_result = self.parse_file(data, name, mime_type)
        processed = self._record(parse_result)
        self.integrate_converted_data(processed)
        return processed

    def process_input(self, file: InputFile) -> ProcessedFile:
        return self.process_file(file.data, file.name, file.mime_type)

    def _try_parse(self, file: InputFile) -> Union[ParseResult, Exception]:
        try:
            return self.parse_file(file.data, file.name, file.mime_type)
        except Exception as e:  # isolate per-file failures from the batch
            return e

    def batch_process_files(self, files: Iterable[InputFile], max_workers: int = 1) -> BatchResult:
        """
        Convert many packages, isolating failures.

        With max_workers > 1 the pipeline stages run in a thread pool, but
        results are recorded here in input order, so successful/failed come
        out the same regardless of completion order.
        """
        files = list(files)
        result = BatchResult(total=len(files))

        if max_workers > 1 and len(files) > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as pool:
                outcomes = list(pool.map(self._try_parse, files))
        else:
            outcomes = (self._try_parse(f) for f in files)

        for file, outcome in zip(files, outcomes):
            if isinstance(outcome, Exception):
                message = f"{type(outcome).__name__}: {outcome}"
                print(f"[storyimport:err] {ERROR} Failed to process {file.name}: {message}")
                result.failed.append(BatchFailure(file_name=file.name, error=message))
                continue

            processed = self._record(outcome)
            self.integrate_converted_data(processed)
            result.successful.append(processed)

        print(f"[storyimport] Batch complete: {len(result.successful)} converted, "
              f"{len(result.failed)} failed, {result.total} total")
        return result

    # ------------------------------------------------------------------
    # Collaborators
    # ------------------------------------------------------------------

    def _report_integration_error(self, error: IntegrationError) -> None:
        with self._lock:
            self.integration_errors.append(error)
        print(f"[storyimport:err] {ERROR} {error}")

    def register_template_for_type(self, template_type: TemplateType) -> bool:
        """Tell the registry about a template type it has not seen. Returns True if registered now."""
        if self.template_registry is None:
            return False

        try:
            if self.template_registry.is_registered(template_type.value):
                return False
            self.template_registry.register(template_type.value, template_constructor_hint(template_type))
            return True
        except Exception as e:
            self._report_integration_error(IntegrationError(
                f"Template registry failed for {template_type.value}",
                context={"template_type": template_type.value},
                cause=e,
            ))
            return False

    def save_converted_data(self, processed: ProcessedFile) -> bool:
        if self.activity_store is None:
            return False

        try:
            self.activity_store.save_activity(processed.converted_data)
            return True
        except Exception as e:
            self._report_integration_error(IntegrationError(
                f"Failed to persist {processed.original_file_name}",
                suggestion="The conversion result is still available locally",
                context={"processed_file_id": processed.id},
                cause=e,
            ))
            return False

    def integrate_converted_data(self, processed: ProcessedFile) -> Dict[str, Any]:
        """Hand a processed file's document to the registry and the store."""
        registered = self.register_template_for_type(processed.template_type)
        persisted = self.save_converted_data(processed)

        return {
            "success": True,
            "templateType": processed.template_type.value,
            "integratedData": processed.converted_data,
            "registered": registered,
            "persisted": persisted,
            "message": f"Successfully integrated {processed.original_file_name} "
                       f"as {processed.template_type.value} template",
        }

    # ------------------------------------------------------------------
    # Lookup and export
    # ------------------------------------------------------------------

    def get_processed_file(self, file_id: str) -> Optional[ProcessedFile]:
        return self.processed_files.get(file_id)

    def get_all_processed_files(self) -> List[ProcessedFile]:
        return list(self.processed_files.values())

    def get_conversion_history(self, limit: int = DEFAULT_HISTORY_LIMIT) -> List[ProcessedFile]:
        """Most recent entries, oldest first."""
        if limit <= 0:
            return []
        return self.conversion_history[-limit:]

    def clear_cache(self) -> None:
        with self._lock:
            self.processed_files.clear()
            self.conversion_history = []
            self.integration_errors = []

    def export_processed_file(self, file_id: str, fmt: str = "json") -> str:
        """
        Serialise a recorded document as json, xml, csv or yaml.

        Raises:
            ProcessedFileNotFound: No processed file under file_id
            UnsupportedExportFormat: Unknown fmt
        """
        processed = self.get_processed_file(file_id)
        if processed is None:
            raise ProcessedFileNotFound(f"Processed file with ID {file_id} not found")

        return export_document(processed.converted_data, processed.template_type, fmt)
