"""Request/processor/producer pipeline behind the CLI commands.

Processors never raise: failures come back as an error `ResultEnvelope`
whose diagnostics carry a message and exit code. Producers print or write
the result.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Generic, List, Optional, Protocol, TypeVar

from .cli_errors import CLIError, ExitCode
from .cli_output import OutputWriter
from .form import FormState, SubmissionResponse, handle_submission, merge_candidates
from .generator import ScheduleGenerator
from .model import ScheduleRequest
from .yamlio import dump_config

PayloadT = TypeVar("PayloadT")
ResultT = TypeVar("ResultT")
T = TypeVar("T")
R = TypeVar("R")


@dataclass
class ResultEnvelope(Generic[ResultT]):
    status: str
    payload: Optional[ResultT] = None
    diagnostics: Optional[Dict[str, Any]] = None

    def ok(self) -> bool:
        return self.status.lower() == "success"

    def unwrap(self) -> ResultT:
        """Return payload or raise ValueError. Use after ok() check."""
        if self.payload is None:
            msg = (self.diagnostics or {}).get("message", "No payload")
            raise ValueError(msg)
        return self.payload

    @property
    def exit_code(self) -> int:
        if self.ok():
            return int(ExitCode.SUCCESS)
        return int((self.diagnostics or {}).get("code", ExitCode.USAGE))


class Processor(Protocol[PayloadT, ResultT]):
    def process(self, payload: PayloadT) -> ResultT:
        ...


class Producer(Protocol[ResultT]):
    def produce(self, result: ResultT) -> None:
        ...


class SafeProcessor(Generic[T, R]):
    """Processor base that turns exceptions into error envelopes.

    `CLIError` keeps its own exit code; anything else maps to ExitCode.ERROR.
    """

    def process(self, payload: T) -> ResultEnvelope[R]:
        try:
            return ResultEnvelope(status="success", payload=self._process_safe(payload))
        except CLIError as e:
            return ResultEnvelope(status="error", diagnostics={"message": e.message, "code": int(e.code)})
        except Exception as e:
            return ResultEnvelope(status="error", diagnostics={"message": str(e), "code": int(ExitCode.ERROR)})

    def _process_safe(self, payload: T) -> R:
        raise NotImplementedError("Subclass must implement _process_safe")


class BaseProducer:
    """Producer base: prints the error message, delegates success."""

    def __init__(self, writer: Optional[OutputWriter] = None) -> None:
        self.writer = writer or OutputWriter()

    def produce(self, result: ResultEnvelope) -> None:
        if not result.ok():
            msg = (result.diagnostics or {}).get("message")
            if msg:
                self.writer.print_error(msg)
            return
        if result.payload is not None:
            self._produce_success(result.payload, result.diagnostics)

    def _produce_success(self, payload: Any, diagnostics: Optional[Dict[str, Any]]) -> None:
        raise NotImplementedError("Subclass must implement _produce_success")


def run_pipeline(request: Any, processor: Any, producer: Any) -> int:
    """Process, produce, and return the CLI exit code."""
    envelope = processor.process(request)
    producer.produce(envelope)
    return envelope.exit_code


# -----------------------------------------------------------------------------
# generate
# -----------------------------------------------------------------------------


@dataclass
class GenerateRequest:
    request: ScheduleRequest
    existing: Optional[str] = None
    out_path: Optional[Path] = None
    strict_time_range: bool = False


@dataclass
class GenerateResult:
    text: str
    lines: List[str] = field(default_factory=list)
    out_path: Optional[Path] = None


class GenerateProcessor(SafeProcessor[GenerateRequest, GenerateResult]):
    def __init__(self, generator: Optional[ScheduleGenerator] = None) -> None:
        self.generator = generator or ScheduleGenerator()

    def _process_safe(self, payload: GenerateRequest) -> GenerateResult:
        request = payload.request.validate(strict_time_range=payload.strict_time_range)
        lines = self.generator.lines(request)
        text = "\n".join(lines)
        if payload.existing is not None:
            text = merge_candidates(payload.existing, text, request.overwrite_existing)
        return GenerateResult(text=text, lines=lines, out_path=payload.out_path)


class GenerateProducer(BaseProducer):
    def _produce_success(self, payload: GenerateResult, diagnostics: Optional[Dict[str, Any]]) -> None:
        if payload.out_path is not None:
            payload.out_path.parent.mkdir(parents=True, exist_ok=True)
            payload.out_path.write_text(payload.text + ("\n" if payload.text else ""), encoding="utf-8")
            self.writer.print(f"Wrote {len(payload.lines)} candidate lines to {payload.out_path}")
            return
        if self.writer.structured:
            self.writer.print_data({"lines": payload.lines, "text": payload.text})
        elif payload.text:
            self.writer.print_data(payload.text)
        else:
            self.writer.print_verbose("No candidate dates in range.")


# -----------------------------------------------------------------------------
# submit
# -----------------------------------------------------------------------------


@dataclass
class SubmitRequest:
    data: Any
    form: FormState
    form_out: Optional[Path] = None


@dataclass
class SubmitResult:
    response: SubmissionResponse
    form: FormState
    form_out: Optional[Path] = None


class SubmitProcessor(SafeProcessor[SubmitRequest, SubmitResult]):
    """Runs the form-fill flow; a rejected submission is still a result."""

    def __init__(self, generator: Optional[ScheduleGenerator] = None) -> None:
        self.generator = generator or ScheduleGenerator()

    def _process_safe(self, payload: SubmitRequest) -> SubmitResult:
        response, filled = handle_submission(payload.data, payload.form, self.generator)
        return SubmitResult(response=response, form=filled, form_out=payload.form_out)

    def process(self, payload: SubmitRequest) -> ResultEnvelope[SubmitResult]:
        envelope = super().process(payload)
        if envelope.ok() and not envelope.unwrap().response.success:
            envelope.status = "rejected"
            envelope.diagnostics = {"code": int(ExitCode.ERROR)}
        return envelope


class SubmitProducer(BaseProducer):
    """Prints the `{success, message}` response, rejected or not."""

    def produce(self, result: ResultEnvelope) -> None:
        if result.payload is None:
            super().produce(result)
            return
        self._produce_success(result.payload, result.diagnostics)

    def _produce_success(self, payload: SubmitResult, diagnostics: Optional[Dict[str, Any]]) -> None:
        if payload.response.success and payload.form_out is not None:
            dump_config(str(payload.form_out), payload.form.to_dict())
        if self.writer.structured:
            self.writer.print_data(payload.response.to_dict())
            return
        if payload.response.success:
            self.writer.print_data(f"OK: {payload.response.message}")
        else:
            self.writer.print_error(payload.response.message)
