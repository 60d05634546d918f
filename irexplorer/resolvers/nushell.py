"""Block resolver backed by Nushell's ``view ir --json`` command.

Each resolution runs one ``nu --commands`` script that prints the IR document
together with the source text its span covers. Instructions use Nushell's
externally tagged JSON encoding, e.g. ``{"Call": {"decl_id": 12, ...}}``.
"""

from __future__ import annotations

import json
import logging
import subprocess

from ..model import Block, Instruction, InstructionKind, LiteralKind, ReferenceKind, Span
from . import ResolutionError

logger = logging.getLogger(__name__)

DEFAULT_NU_EXECUTABLE = "nu"
DEFAULT_TIMEOUT_SECONDS = 10.0

_LITERAL_KINDS: dict[str, LiteralKind] = {
    "Block": LiteralKind.BLOCK,
    "Closure": LiteralKind.CLOSURE,
    "RowCondition": LiteralKind.ROW_CONDITION,
}
_BRANCH_INSTRUCTIONS = frozenset(
    {"Jump", "BranchIf", "BranchIfEmpty", "Match", "Iterate", "OnError", "OnErrorInto"}
)

_SCRIPT_TEMPLATE = (
    "let ir = (view ir --json {args} | from json); "
    "{{view_ir: $ir, source: (view span $ir.span.start $ir.span.end)}} | to json --raw"
)


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def _is_integer_id(identifier: object) -> bool:
    if isinstance(identifier, int) and not isinstance(identifier, bool):
        return True
    text = str(identifier)
    return text.isascii() and text.isdecimal()


def view_ir_arguments(identifier: object, kind: ReferenceKind) -> str:
    """Build the ``view ir`` argument list for one identifier.

    Integer definition ids use ``--decl-id``; names are passed as strings.
    Block ids are passed as integers and anything else is spliced verbatim
    as a closure expression.
    """
    if kind is ReferenceKind.DEFINITION:
        if _is_integer_id(identifier):
            return f"--decl-id {int(str(identifier))}"
        return _quote(str(identifier))
    if _is_integer_id(identifier):
        return str(int(str(identifier)))
    return str(identifier)


def _span(raw: object) -> Span | None:
    if not isinstance(raw, dict):
        return None
    start = raw.get("start")
    end = raw.get("end")
    if not isinstance(start, int) or not isinstance(end, int):
        return None
    return Span(start, end)


def decode_instruction(raw: object) -> Instruction:
    """Classify one JSON-encoded IR instruction."""
    if isinstance(raw, str):
        name, body = raw, {}
    elif isinstance(raw, dict) and len(raw) == 1:
        name, body = next(iter(raw.items()))
    else:
        return Instruction(kind=InstructionKind.OTHER, text="", raw=raw)
    if not isinstance(body, dict):
        body = {}

    if name == "Call":
        return Instruction(kind=InstructionKind.CALL, text=name, target=body.get("decl_id"), raw=raw)

    if name == "LoadLiteral":
        literal = body.get("lit")
        if isinstance(literal, dict) and len(literal) == 1:
            lit_name, lit_value = next(iter(literal.items()))
            literal_kind = _LITERAL_KINDS.get(lit_name)
            if literal_kind is not None:
                return Instruction(
                    kind=InstructionKind.LOAD_LITERAL,
                    text=name,
                    literal_kind=literal_kind,
                    target=lit_value,
                    raw=raw,
                )
        return Instruction(kind=InstructionKind.LOAD_LITERAL, text=name, literal_kind=LiteralKind.PLAIN, raw=raw)

    if name in _BRANCH_INSTRUCTIONS:
        index = body.get("index", body.get("end_index"))
        if isinstance(index, int) and not isinstance(index, bool):
            return Instruction(kind=InstructionKind.BRANCH, text=name, branch_target=index, raw=raw)

    return Instruction(kind=InstructionKind.OTHER, text=name, raw=raw)


def _require_list(value: object, field_name: str) -> list:
    if not isinstance(value, list):
        raise ResolutionError(f"Failed to parse output of `view ir`: {field_name} is not a list")
    return value


def parse_view_ir_document(document: object) -> Block:
    """Build a block from ``{"view_ir": ..., "source": ...}`` output.

    Any malformed shape is reported as ``ResolutionError``.
    """
    try:
        view_ir = document["view_ir"]
        source = document["source"]
        ir_block = view_ir["ir_block"]
        raw_instructions = _require_list(ir_block["instructions"], "instructions")
        raw_spans = _require_list(ir_block["spans"], "spans")
        formatted = _require_list(view_ir["formatted_instructions"], "formatted_instructions")
        comments = ir_block.get("comments") or [""] * len(raw_instructions)
        comments = _require_list(comments, "comments")
        block_span = _span(view_ir["span"])
        block_id = view_ir["block_id"]
    except (KeyError, TypeError, AttributeError) as exc:
        raise ResolutionError(f"Failed to parse output of `view ir`: missing {exc}") from exc
    if block_span is None:
        raise ResolutionError("Failed to parse output of `view ir`: invalid block span")
    if not isinstance(source, str):
        raise ResolutionError("Failed to parse output of `view ir`: source is not a string")

    try:
        return Block.from_parallel(
            block_id=block_id,
            span=block_span,
            source=source,
            instructions=[decode_instruction(raw) for raw in raw_instructions],
            spans=[_span(raw) for raw in raw_spans],
            formatted=[str(text) for text in formatted],
            comments=[str(comment or "") for comment in comments],
            name=f"block {block_id}",
            language="nu",
        )
    except ValueError as exc:
        raise ResolutionError(f"Failed to parse output of `view ir`: {exc}") from exc


class NuResolver:
    """Resolve Nushell declarations and blocks through a ``nu`` subprocess."""

    def __init__(
        self,
        executable: str = DEFAULT_NU_EXECUTABLE,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.executable = executable
        self.timeout_seconds = timeout_seconds

    def script_for(self, identifier: object, kind: ReferenceKind) -> str:
        """Return the ``nu --commands`` script that prints the block as JSON."""
        return _SCRIPT_TEMPLATE.format(args=view_ir_arguments(identifier, kind))

    def resolve(self, identifier: object, kind: ReferenceKind) -> Block:
        """Run ``nu`` once and parse its output.

        A missing executable, a timeout, a non-zero exit and malformed JSON all
        surface as ``ResolutionError``.
        """
        script = self.script_for(identifier, kind)
        logger.debug("running %s for %s %r", self.executable, kind.value, identifier)
        try:
            completed = subprocess.run(
                [self.executable, "--commands", script],
                capture_output=True,
                text=True,
                timeout=self.timeout_seconds,
                check=False,
            )
        except FileNotFoundError as exc:
            raise ResolutionError(f"Can't find `{self.executable}` executable") from exc
        except subprocess.TimeoutExpired as exc:
            logger.warning("view ir timed out after %ss for %r", self.timeout_seconds, identifier)
            raise ResolutionError(f"`view ir` timed out after {self.timeout_seconds:g}s") from exc

        if completed.returncode != 0:
            detail = completed.stderr.strip() or f"exit status {completed.returncode}"
            logger.warning("view ir failed for %r: %s", identifier, detail)
            raise ResolutionError(detail)

        try:
            document = json.loads(completed.stdout)
        except json.JSONDecodeError as exc:
            raise ResolutionError(f"Failed to parse output of `view ir`: {exc}") from exc
        return parse_view_ir_document(document)
