"""Static block resolver for CPython code objects.

Compiles source files (never imports or executes them) and exposes each code
object as a ``Block``. Instruction spans come from ``dis`` position info, whose
column offsets are UTF-8 byte offsets, so they map directly onto file bytes.
"""

from __future__ import annotations

import dis
import importlib.machinery
import logging
import types
from dataclasses import dataclass, field
from pathlib import Path

from ..model import Block, Instruction, InstructionKind, LiteralKind, ReferenceKind, Span
from . import ResolutionError

logger = logging.getLogger(__name__)

_JUMP_OPCODES = frozenset(dis.hasjrel) | frozenset(dis.hasjabs) | frozenset(getattr(dis, "hasjump", ()))
_NAME_LOAD_OPNAMES = frozenset({"LOAD_GLOBAL", "LOAD_NAME"})
_OPNAME_WIDTH = 24


@dataclass
class _CompiledModule:
    path: Path
    source: bytes
    code: types.CodeType
    line_starts: list[int]
    definitions: dict[str, types.CodeType] = field(default_factory=dict)
    top_level_functions: set[str] = field(default_factory=set)

    def offset(self, line: int | None, col: int | None) -> int | None:
        """Convert a 1-based line and byte column into an absolute byte offset."""
        if line is None or col is None:
            return None
        if not 1 <= line <= len(self.line_starts):
            return None
        return min(len(self.source), self.line_starts[line - 1] + col)

    def line_end(self, line: int) -> int:
        """Return the byte offset of the newline ending ``line`` (or EOF)."""
        if line < len(self.line_starts):
            return self.line_starts[line] - 1
        return len(self.source)


def _line_starts(source: bytes) -> list[int]:
    starts = [0]
    pos = source.find(b"\n")
    while pos >= 0:
        starts.append(pos + 1)
        pos = source.find(b"\n", pos + 1)
    return starts


def _iter_code_objects(code: types.CodeType):
    yield code
    for const in code.co_consts:
        if isinstance(const, types.CodeType):
            yield from _iter_code_objects(const)


def _starting_line(ins: dis.Instruction) -> int | None:
    starts = ins.starts_line
    if isinstance(starts, bool):
        return getattr(ins, "line_number", None) if starts else None
    return starts


def _jump_target_offset(ins: dis.Instruction) -> int | None:
    if ins.opcode not in _JUMP_OPCODES:
        return None
    target = getattr(ins, "jump_target", None)
    if target is None and isinstance(ins.argval, int):
        target = ins.argval
    return target


def _nested_literal_kind(code: types.CodeType) -> LiteralKind:
    if code.co_name == "<lambda>" or code.co_freevars:
        return LiteralKind.CLOSURE
    return LiteralKind.BLOCK


def _find_module_source(dotted: str) -> Path:
    """Locate the source file of a dotted module name without importing it.

    Each package level is searched with ``PathFinder`` using the parent's
    search locations, so no ``__init__.py`` along the way is executed.
    """
    parts = dotted.split(".")
    if not all(part.isidentifier() for part in parts):
        raise ResolutionError(f"not a module name: {dotted!r}")
    search_path: list[str] | None = None
    spec = None
    for depth, part in enumerate(parts):
        if depth and search_path is None:
            raise ResolutionError(f"{'.'.join(parts[:depth])!r} is not a package")
        try:
            spec = importlib.machinery.PathFinder.find_spec(part, search_path)
        except (ImportError, ValueError, OSError) as exc:
            raise ResolutionError(f"cannot locate module {dotted!r}: {exc}") from exc
        if spec is None:
            raise ResolutionError(f"cannot locate module {dotted!r}")
        locations = spec.submodule_search_locations
        search_path = list(locations) if locations is not None else None
    if spec is None or not spec.origin or not spec.origin.endswith(".py"):
        raise ResolutionError(f"module {dotted!r} has no Python source")
    return Path(spec.origin).resolve()


class BytecodeResolver:
    """Resolve ``file.py:qualname`` / ``package.module:qualname`` definitions.

    Block references are either ids handed out for nested code objects found
    while building earlier blocks, or a file/module whose module-level code
    becomes the block.
    """

    def __init__(self) -> None:
        self._modules: dict[Path, _CompiledModule] = {}
        self._nested: dict[str, tuple[types.CodeType, _CompiledModule]] = {}

    def resolve(self, identifier: object, kind: ReferenceKind) -> Block:
        """Compile the referenced file if needed and build the requested block."""
        target = str(identifier)
        if kind is ReferenceKind.DEFINITION:
            code, module, block_id = self._lookup_definition(target)
        else:
            code, module, block_id = self._lookup_block(target)
        logger.debug("resolved %s %r to %s", kind.value, target, block_id)
        return self._build_block(code, module, block_id)

    def _lookup_definition(self, target: str) -> tuple[types.CodeType, _CompiledModule, str]:
        location, sep, qualname = target.rpartition(":")
        if not sep or not location or not qualname:
            raise ResolutionError(
                f"definition reference must look like 'file.py:qualname' or 'module:qualname', got {target!r}"
            )
        module = self._load_module(location)
        code = module.definitions.get(qualname)
        if code is None:
            raise ResolutionError(f"no definition named {qualname!r} in {module.path}")
        return code, module, f"{module.path}:{qualname}"

    def _lookup_block(self, target: str) -> tuple[types.CodeType, _CompiledModule, str]:
        nested = self._nested.get(target)
        if nested is not None:
            code, module = nested
            return code, module, target
        module = self._load_module(target)
        return module.code, module, str(module.path)

    def _locate(self, location: str) -> Path:
        path = Path(location)
        if path.suffix == ".py" or path.exists():
            if not path.is_file():
                raise ResolutionError(f"source file not found: {path}")
            return path.resolve()
        return _find_module_source(location)

    def _load_module(self, location: str) -> _CompiledModule:
        path = self._locate(location)
        cached = self._modules.get(path)
        if cached is not None:
            return cached
        try:
            source = path.read_bytes()
        except OSError as exc:
            raise ResolutionError(f"cannot read {path}: {exc}") from exc
        try:
            code = compile(source, str(path), "exec", dont_inherit=True)
        except (SyntaxError, ValueError) as exc:
            raise ResolutionError(f"cannot compile {path}: {exc}") from exc

        module = _CompiledModule(path=path, source=source, code=code, line_starts=_line_starts(source))
        for nested in _iter_code_objects(code):
            if nested is code:
                continue
            # Later definitions shadow earlier ones, like rebinding a name.
            module.definitions[nested.co_qualname] = nested
        for const in code.co_consts:
            if isinstance(const, types.CodeType) and not const.co_name.startswith("<"):
                module.top_level_functions.add(const.co_name)
        self._modules[path] = module
        return module

    def _register_nested(self, code: types.CodeType, module: _CompiledModule) -> str:
        base = f"{module.path}:{code.co_firstlineno}:{code.co_qualname}"
        candidate = base
        suffix = 1
        while candidate in self._nested and self._nested[candidate][0] is not code:
            suffix += 1
            candidate = f"{base}#{suffix}"
        self._nested[candidate] = (code, module)
        return candidate

    def _block_span(self, code: types.CodeType, module: _CompiledModule, raw: list[dis.Instruction]) -> Span:
        if code is module.code:
            return Span(0, len(module.source))
        start = module.offset(code.co_firstlineno, 0) or 0
        last_line = code.co_firstlineno
        for ins in raw:
            end_line = ins.positions.end_lineno if ins.positions else None
            if end_line is not None:
                last_line = max(last_line, end_line)
        return Span(start, module.line_end(last_line))

    def _build_block(self, code: types.CodeType, module: _CompiledModule, block_id: str) -> Block:
        raw = list(dis.get_instructions(code))
        index_by_offset = {ins.offset: index for index, ins in enumerate(raw)}
        span = self._block_span(code, module, raw)

        instructions: list[Instruction] = []
        spans: list[Span | None] = []
        formatted: list[str] = []
        comments: list[str] = []
        for ins in raw:
            instructions.append(self._convert(ins, module, index_by_offset))
            spans.append(self._instruction_span(ins, module))
            formatted.append(f"{ins.opname:<{_OPNAME_WIDTH}}{ins.argrepr}".rstrip())
            notes: list[str] = []
            line = _starting_line(ins)
            if line is not None:
                notes.append(f"line {line}")
            if ins.is_jump_target:
                notes.append("jump target")
            comments.append(", ".join(notes))

        return Block.from_parallel(
            block_id=block_id,
            span=span,
            source=module.source[span.start : span.end],
            instructions=instructions,
            spans=spans,
            formatted=formatted,
            comments=comments,
            name=code.co_qualname,
            language="python",
        )

    def _instruction_span(self, ins: dis.Instruction, module: _CompiledModule) -> Span | None:
        positions = ins.positions
        if positions is None:
            return None
        start = module.offset(positions.lineno, positions.col_offset)
        end = module.offset(positions.end_lineno, positions.end_col_offset)
        if start is None or end is None or end < start:
            return None
        return Span(start, end)

    def _convert(
        self,
        ins: dis.Instruction,
        module: _CompiledModule,
        index_by_offset: dict[int, int],
    ) -> Instruction:
        text = ins.opname
        if ins.opname == "LOAD_CONST":
            if isinstance(ins.argval, types.CodeType):
                return Instruction(
                    kind=InstructionKind.LOAD_LITERAL,
                    text=text,
                    literal_kind=_nested_literal_kind(ins.argval),
                    target=self._register_nested(ins.argval, module),
                    raw=ins,
                )
            return Instruction(kind=InstructionKind.LOAD_LITERAL, text=text, literal_kind=LiteralKind.PLAIN, raw=ins)

        if ins.opname in _NAME_LOAD_OPNAMES and ins.argval in module.top_level_functions:
            return Instruction(
                kind=InstructionKind.CALL,
                text=text,
                target=f"{module.path}:{ins.argval}",
                raw=ins,
            )

        target_offset = _jump_target_offset(ins)
        if target_offset is not None and target_offset in index_by_offset:
            return Instruction(
                kind=InstructionKind.BRANCH,
                text=text,
                branch_target=index_by_offset[target_offset],
                raw=ins,
            )
        return Instruction(kind=InstructionKind.OTHER, text=text, raw=ins)
