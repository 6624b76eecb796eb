"""
squirrelgraph Compiler: Node Templates
=======================================
One NodeTemplate per node type.  A template has a single hook:

  emit(ctx, node, writer)
      Emits the statement form of ``node`` into ``writer`` at the current
      depth, binds any output values with ``ctx.bind``, and continues control
      flow with ``ctx.follow`` through its exec outputs.

Templates come in a few shapes:

  value      binds an expression, emits nothing (constants, compares, reroute)
  local      emits ``local <tmp> = <expr>`` and binds <tmp> (getters, math)
  statement  emits call line(s), then follows its exec output (setters, damage)
  block      branch / loops: emit a header and walk bodies one level deeper
  thread     registers a hoisted callable and emits ``thread <name>()``

Inputs are always resolved before the template writes its own line: values
generated on demand are spliced into the writer ahead of the consuming line.

Adding a new node type
----------------------
1. Describe its ports in definitions.NODE_DEFINITIONS.
2. Register a template: TEMPLATE_REGISTRY["my-type"] = SomeTemplate(...)

Unregistered types fall back to DefaultTemplate (TODO comment + best-effort
continuation through the first exec output).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, List, Union

if TYPE_CHECKING:
    from .context import CompileContext
    from .ir import IRNode

logger = logging.getLogger(__name__)


# ── Code writer ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Continuation:
    """An exec connection still to be walked, and the depth it was followed at."""
    node_id: str
    indent: int


Line = Union[str, Continuation]


class CodeWriter:
    """
    Indented line accumulator.  Besides text it holds Continuation markers
    left by ``ctx.follow``; ``walker.expand`` replaces them with the code of
    the nodes they point at.
    """

    def __init__(self, indent: int = 0):
        self._lines: List[Line] = []
        self._indent = indent

    def writeln(self, line: str = "") -> "CodeWriter":
        if line:
            self._lines.append("    " * self._indent + line)
        else:
            self._lines.append("")
        return self

    def comment(self, text: str) -> "CodeWriter":
        return self.writeln(f"// {text}")

    def defer(self, node_id: str, indent: int) -> "CodeWriter":
        self._lines.append(Continuation(node_id, indent))
        return self

    def raw(self, lines: Iterable[Line]) -> "CodeWriter":
        """Append lines that already carry their own indentation."""
        self._lines.extend(lines)
        return self

    def lines(self) -> List[Line]:
        return self._lines


def _number(value: Any, default: Any = 0) -> str:
    if value is None or value == "":
        value = default
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value) if isinstance(value, str) else repr(value)


# ── Base template ─────────────────────────────────────────────────────────────

class NodeTemplate:
    """
    Base class.  The default ``emit`` is the unknown-type behaviour, so a
    template that forgets to override it still makes forward progress.
    """

    def emit(self, ctx: "CompileContext", node: "IRNode", writer: CodeWriter) -> None:
        writer.comment(f"TODO: {node.type_name} - {node.label}")
        exec_outs = node.exec_outputs()
        if exec_outs:
            ctx.follow(node, exec_outs[0].id, writer)


class DefaultTemplate(NodeTemplate):
    """Fallback for unregistered node types."""

    def emit(self, ctx: "CompileContext", node: "IRNode", writer: CodeWriter) -> None:
        logger.warning("No template for node type '%s' (node %s)", node.type_name, node.id)
        super().emit(ctx, node, writer)


class EntryTemplate(NodeTemplate):
    """
    Init and event nodes.  Their bodies are emitted by the driver as the root
    of their own pass; met anywhere else they contribute nothing.
    """

    def emit(self, ctx: "CompileContext", node: "IRNode", writer: CodeWriter) -> None:
        logger.debug("Entry node %s reached outside its own pass; skipped", node.id)


# ── Value / local / statement shapes ─────────────────────────────────────────

class ValueTemplate(NodeTemplate):
    """Binds ``render(node)`` to output_0 without emitting a line."""

    def __init__(self, render: Callable[["IRNode"], str], out_port: str = "output_0"):
        self.render = render
        self.out_port = out_port

    def emit(self, ctx, node, writer):
        ctx.bind(node, self.out_port, self.render(node))


class ExprTemplate(NodeTemplate):
    """Binds an expression built from resolved inputs, e.g. ``(a == b)``."""

    def __init__(self, fmt: str, *args: str, out_port: str = "output_0"):
        self.fmt = fmt
        self.args = args
        self.out_port = out_port

    def emit(self, ctx, node, writer):
        values = [ctx.value_of(node, p) for p in self.args]
        ctx.bind(node, self.out_port, self.fmt.format(*values))


class LocalTemplate(NodeTemplate):
    """
    Emits ``local <prefix><n> = <expr>`` and binds the temporary to
    ``out_port``.  With ``next_port`` set, control flow continues after it.
    """

    def __init__(self, prefix: str, fmt: str, *args: str,
                 out_port: str = "output_0", next_port: str = None):
        self.prefix = prefix
        self.fmt = fmt
        self.args = args
        self.out_port = out_port
        self.next_port = next_port

    def emit(self, ctx, node, writer):
        values = [ctx.value_of(node, p) for p in self.args]
        var = ctx.new_var(self.prefix)
        ctx.bind(node, self.out_port, var)
        writer.writeln(f"local {var} = " + self.fmt.format(*values))
        if self.next_port:
            ctx.follow(node, self.next_port, writer)


class StatementTemplate(NodeTemplate):
    """One call line built from resolved inputs, then continue through output_0."""

    def __init__(self, fmt: str, *args: str, next_port: str = "output_0"):
        self.fmt = fmt
        self.args = args
        self.next_port = next_port

    def emit(self, ctx, node, writer):
        values = [ctx.value_of(node, p) for p in self.args]
        writer.writeln(self.fmt.format(*values))
        if self.next_port:
            ctx.follow(node, self.next_port, writer)


class RerouteTemplate(NodeTemplate):
    """Data reroute: output_0 is whatever feeds input_0."""

    def emit(self, ctx, node, writer):
        ctx.bind(node, "output_0", ctx.value_of(node, "input_0"))


class ArrayAppendTemplate(NodeTemplate):

    def emit(self, ctx, node, writer):
        array = ctx.value_of(node, "input_1")
        element = ctx.value_of(node, "input_2")
        writer.writeln(f"{array}.append({element})")
        ctx.bind(node, "output_1", array)
        ctx.follow(node, "output_0", writer)


class RegisterModWeaponTemplate(NodeTemplate):
    """Fills a CustomWeaponData struct field by field, then registers it."""

    FIELDS = (
        "className", "name", "hudIcon", "weaponType", "pickupSound1p",
        "pickupSound3p", "tier", "baseMods", "supportedAttachments",
        "lowWeaponChance", "medWeaponChance", "highWeaponChance",
    )

    def emit(self, ctx, node, writer):
        values = [ctx.value_of(node, f"input_{i}") for i in range(1, len(self.FIELDS) + 1)]
        register_in_loot = ctx.value_of(node, f"input_{len(self.FIELDS) + 1}")
        data_var = ctx.new_var("weaponData")

        writer.writeln(f"CustomWeaponData {data_var}")
        for field_name, value in zip(self.FIELDS, values):
            writer.writeln(f"{data_var}.{field_name} = {value}")
        writer.writeln(f"RegisterModWeapon({data_var}, {register_in_loot})")
        ctx.follow(node, "output_0", writer)


# ── Control flow ─────────────────────────────────────────────────────────────

class SequenceTemplate(NodeTemplate):
    """Runs every exec output in port order."""

    def emit(self, ctx, node, writer):
        for port in node.exec_outputs():
            ctx.follow(node, port.id, writer)


class ExecRerouteTemplate(NodeTemplate):

    def emit(self, ctx, node, writer):
        ctx.follow(node, "output_0", writer)


class ReturnTemplate(NodeTemplate):

    def emit(self, ctx, node, writer):
        writer.writeln("return")


class BranchTemplate(NodeTemplate):
    """
    ``if (cond) { true body }`` with an ``else`` block only when the False
    output is wired.
    """

    def emit(self, ctx, node, writer):
        condition = ctx.value_of(node, "input_1")
        writer.writeln(f"if ({condition})")
        with ctx.block(writer):
            ctx.follow(node, "output_0", writer)

        if ctx.graph.get_outgoing(node.id, "output_1"):
            writer.writeln("else")
            with ctx.block(writer):
                ctx.follow(node, "output_1", writer)


class ForLoopTemplate(NodeTemplate):
    """Counted loop; the index temporary is bound to output_1 for the body."""

    def emit(self, ctx, node, writer):
        start = ctx.value_of(node, "input_1")
        end = ctx.value_of(node, "input_2")
        step = ctx.value_of(node, "input_3")
        index_var = ctx.new_var("i")
        ctx.bind(node, "output_1", index_var)

        writer.writeln(
            f"for (local {index_var} = {start}; {index_var} < {end}; {index_var} += {step})"
        )
        with ctx.block(writer):
            ctx.follow(node, "output_0", writer)
        ctx.follow(node, "output_2", writer)


class ForEachTemplate(NodeTemplate):
    """``foreach (idx, elem in array)``; element → output_1, index → output_2."""

    def emit(self, ctx, node, writer):
        array = ctx.value_of(node, "input_1")
        elem_var = ctx.new_var("elem")
        index_var = ctx.new_var("idx")
        ctx.bind(node, "output_1", elem_var)
        ctx.bind(node, "output_2", index_var)

        writer.writeln(f"foreach ({index_var}, {elem_var} in {array})")
        with ctx.block(writer):
            ctx.follow(node, "output_0", writer)
        ctx.follow(node, "output_3", writer)


class WhileTemplate(NodeTemplate):

    def emit(self, ctx, node, writer):
        condition = ctx.value_of(node, "input_1")
        writer.writeln(f"while ({condition})")
        with ctx.block(writer):
            ctx.follow(node, "output_0", writer)
        ctx.follow(node, "output_1", writer)


class ThreadTemplate(NodeTemplate):
    """
    The body (output_0) is hoisted into its own callable by the Thread
    Hoister; only the start call is emitted here.  Continue (output_1) keeps
    running synchronously after the start.
    """

    def emit(self, ctx, node, writer):
        name = ctx.register_thread(node, "output_0")
        writer.writeln(f"thread {name}()")
        ctx.follow(node, "output_1", writer)


# ── Constant renderers ───────────────────────────────────────────────────────

def _const_string(node: "IRNode") -> str:
    from .resolver import format_literal
    return format_literal(str(node.data.get("value") or ""))


def _const_number(node: "IRNode") -> str:
    return _number(node.data.get("value"), 0)


def _const_bool(node: "IRNode") -> str:
    return "true" if node.data.get("value") else "false"


def _const_vector(node: "IRNode") -> str:
    x, y, z = (_number(node.data.get(k), 0) for k in ("x", "y", "z"))
    return f"Vector({x}, {y}, {z})"


def _const_asset(node: "IRNode") -> str:
    return node.data.get("value") or '$""'


def _function_ref(node: "IRNode") -> str:
    return node.data.get("functionName") or "MyFunction"


# ── Registry ──────────────────────────────────────────────────────────────────

_ENTRY = EntryTemplate()

TEMPLATE_REGISTRY: Dict[str, NodeTemplate] = {
    # Entry points
    "init-server":              _ENTRY,
    "init-client":              _ENTRY,
    "init-ui":                  _ENTRY,
    "event":                    _ENTRY,
    "on-weapon-activate":       _ENTRY,
    "on-weapon-primary-attack": _ENTRY,
    "on-projectile-collision":  _ENTRY,

    # Core flow
    "sequence":      SequenceTemplate(),
    "branch":        BranchTemplate(),
    "delay":         StatementTemplate("wait {0}", "input_1"),
    "wait":          StatementTemplate("wait {0}", "input_1"),
    "loop-for":      ForLoopTemplate(),
    "loop-foreach":  ForEachTemplate(),
    "loop-while":    WhileTemplate(),
    "thread":        ThreadTemplate(),
    "call-function": StatementTemplate("{0}()", "input_1"),
    "return":        ReturnTemplate(),
    "reroute-exec":  ExecRerouteTemplate(),

    # Damage
    "entity-take-damage": StatementTemplate(
        "{0}.TakeDamage({3}, {1}, {2}, {{ damageType = {4} }})",
        "input_1", "input_2", "input_3", "input_4", "input_5"),
    "radius-damage": StatementTemplate(
        "RadiusDamage({0}, {1}, {2}, {3}, {4})",
        "input_1", "input_2", "input_3", "input_4", "input_5"),

    # Entity
    "get-origin":          LocalTemplate("origin", "{0}.GetOrigin()", "input_0"),
    "set-origin":          StatementTemplate("{0}.SetOrigin({1})", "input_1", "input_2"),
    "get-velocity":        LocalTemplate("velocity", "{0}.GetVelocity()", "input_0"),
    "set-velocity":        StatementTemplate("{0}.SetVelocity({1})", "input_1", "input_2"),
    "get-health":          LocalTemplate("health", "{0}.GetHealth()", "input_0"),
    "set-health":          StatementTemplate("{0}.SetHealth({1})", "input_1", "input_2"),
    "is-valid":            LocalTemplate("isValid", "IsValid({0})", "input_0"),
    "is-alive":            LocalTemplate("isAlive", "IsAlive({0})", "input_0"),
    "kill-entity":         StatementTemplate("{0}.Kill()", "input_1"),
    "get-weapon-owner":    LocalTemplate("owner", "{0}.GetWeaponOwner()", "input_0"),
    "register-mod-weapon": RegisterModWeaponTemplate(),

    # Weapons / mods
    "get-active-weapon":  LocalTemplate("weapon", "{0}.GetActiveWeapon()", "input_0"),
    "fire-weapon-bullet": StatementTemplate("{0}.FireWeaponBullet()", "input_1"),
    "precache-weapon":    StatementTemplate("PrecacheWeapon({0})", "input_1"),
    "weapon-add-mod":     StatementTemplate("{0}.AddMod({1})", "input_1", "input_2"),
    "weapon-has-mod":     LocalTemplate("hasMod", "{0}.HasMod({1})", "input_0", "input_1"),
    "add-callback":       StatementTemplate("{0}({1})", "input_1", "input_2"),

    # Audio / particles
    "emit-sound-on-entity": StatementTemplate(
        "EmitSoundOnEntity({0}, {1})", "input_1", "input_2"),
    "emit-sound": StatementTemplate(
        "EmitSoundOnEntity({0}, {1})", "input_1", "input_2"),
    "start-particle-on-entity": LocalTemplate(
        "fxHandle",
        "StartParticleEffectOnEntity({0}, GetParticleSystemIndex({1}), "
        "FX_PATTACH_POINT_FOLLOW, {2})",
        "input_1", "input_2", "input_3",
        out_port="output_1", next_port="output_0"),

    # Math
    "vector-create":     LocalTemplate("vec", "Vector({0}, {1}, {2})",
                                       "input_0", "input_1", "input_2"),
    "vector-add":        LocalTemplate("vec", "{0} + {1}", "input_0", "input_1"),
    "vector-normalize":  LocalTemplate("normalized", "Normalize({0})", "input_0"),
    "math-add":          LocalTemplate("result", "{0} + {1}", "input_0", "input_1"),
    "math-multiply":     LocalTemplate("result", "{0} * {1}", "input_0", "input_1"),
    "math-random-float": LocalTemplate("rand", "RandomFloatRange({0}, {1})",
                                       "input_0", "input_1"),
    "compare-equal":     ExprTemplate("({0} == {1})", "input_0", "input_1"),
    "compare-greater":   ExprTemplate("({0} > {1})", "input_0", "input_1"),
    "compare-less":      ExprTemplate("({0} < {1})", "input_0", "input_1"),

    # Data
    "const-string": ValueTemplate(_const_string),
    "const-int":    ValueTemplate(_const_number),
    "const-float":  ValueTemplate(_const_number),
    "const-bool":   ValueTemplate(_const_bool),
    "const-vector": ValueTemplate(_const_vector),
    "const-asset":  ValueTemplate(_const_asset),
    "function-ref": ValueTemplate(_function_ref),
    "reroute":      RerouteTemplate(),
    "array-create": LocalTemplate("arr", "[]"),
    "array-append": ArrayAppendTemplate(),
    "array-get":    LocalTemplate("elem", "{0}[{1}]", "input_0", "input_1"),
    "array-length": LocalTemplate("len", "{0}.len()", "input_0"),

    # Utilities
    "print":           StatementTemplate("print({0})", "input_1"),
    "get-all-players": LocalTemplate("players", "GetPlayerArray()"),
}

# Palette names used by older editor builds.
for _alias, _target in (("string", "const-string"), ("int", "const-int"),
                        ("float", "const-float"), ("bool", "const-bool"),
                        ("vector", "const-vector")):
    TEMPLATE_REGISTRY[_alias] = TEMPLATE_REGISTRY[_target]

_DEFAULT_TEMPLATE = DefaultTemplate()


def get_template(type_name: str) -> NodeTemplate:
    return TEMPLATE_REGISTRY.get(type_name, _DEFAULT_TEMPLATE)
