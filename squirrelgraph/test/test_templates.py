import logging

import pytest

from squirrelgraph.compiler.definitions import NODE_DEFINITIONS
from squirrelgraph.compiler.templates import (
    TEMPLATE_REGISTRY, CodeWriter, Continuation, DefaultTemplate, get_template,
)
from conftest import block_of, data_port, exec_port

SERVER_BODY = "void function CodeCallback_ModInit()"


class TestCodeWriter:

    def test_indent_and_comment(self):
        w = CodeWriter(indent=2)
        w.writeln("a").writeln().comment("note")
        assert w.lines() == ["        a", "", "        // note"]

    def test_raw_keeps_existing_indentation(self):
        w = CodeWriter(indent=1)
        w.raw(["  x", "  y"]).raw(["z"])
        assert w.lines() == ["  x", "  y", "z"]

    def test_defer_keeps_its_place_between_lines(self):
        w = CodeWriter(indent=1)
        w.writeln("a").defer("next", 3).writeln("b")
        assert w.lines() == ["    a", Continuation("next", 3), "    b"]


class TestRegistry:

    def test_every_catalogued_type_has_a_template(self):
        assert set(TEMPLATE_REGISTRY) == set(NODE_DEFINITIONS)

    def test_unknown_types_fall_back(self):
        assert isinstance(get_template("definitely-not-a-node"), DefaultTemplate)


class TestStatementRules:

    def _body(self, graph, *chain):
        start = graph.node("init-server", "start")
        prev = start
        for node_id in chain:
            graph.then(prev, node_id)
            prev = node_id
        return block_of(graph.compile(), SERVER_BODY)

    def test_defaults_fill_unwired_inputs(self, graph):
        dmg = graph.node("entity-take-damage")
        radius = graph.node("radius-damage")
        assert self._body(graph, dmg, radius) == [
            "    null.TakeDamage(10, null, null, { damageType = 0 })",
            "    RadiusDamage(null, null, null, 50, 256)",
        ]

    def test_bare_function_and_asset_inputs(self, graph):
        call = graph.node("call-function", function="OnSpawn")
        callback = graph.node("add-callback")
        fx = graph.node("start-particle-on-entity")
        assert self._body(graph, call, callback, fx) == [
            "    OnSpawn()",
            "    AddClientCommandCallback(MyCallback)",
            "    local fxHandle0 = StartParticleEffectOnEntity(null, "
            'GetParticleSystemIndex($"P_impact_exp_small"), FX_PATTACH_POINT_FOLLOW, 0)',
        ]

    def test_wait_and_return(self, graph):
        delay = graph.node("delay", duration=2.5)
        ret = graph.node("return")
        assert self._body(graph, delay, ret) == ["    wait 2.5", "    return"]

    def test_mod_weapon_rules(self, graph):
        precache = graph.node("precache-weapon", weaponClass="mp_weapon_lance")
        add_mod = graph.node("weapon-add-mod", modName="hopup_turbo")
        assert self._body(graph, precache, add_mod) == [
            '    PrecacheWeapon("mp_weapon_lance")',
            '    null.AddMod("hopup_turbo")',
        ]

    def test_register_mod_weapon(self, graph):
        reg = graph.node("register-mod-weapon", className="mp_weapon_lance", tier=3)
        body = self._body(graph, reg)

        assert body[0] == "    CustomWeaponData weaponData0"
        assert '    weaponData0.className = "mp_weapon_lance"' in body
        assert '    weaponData0.hudIcon = $"rui/weapon_icons/r5/weapon_r97"' in body
        assert "    weaponData0.tier = 3" in body
        assert "    weaponData0.baseMods = []" in body
        assert body[-1] == "    RegisterModWeapon(weaponData0, true)"

    def test_getter_binds_a_local(self, graph):
        start = graph.node("init-server", "start")
        health = graph.node("get-health", "health")
        setter = graph.node("set-health", "setter")
        graph.then(start, setter)
        graph.wire(health, "output_0", setter, "input_2")

        assert block_of(graph.compile(), SERVER_BODY) == [
            "    local health0 = null.GetHealth()",
            "    null.SetHealth(health0)",
        ]


class TestValueRules:

    def _print(self, graph, producer, port="output_0"):
        start = graph.node("init-server", "start")
        p = graph.node("print", "p")
        graph.then(start, p)
        graph.wire(producer, port, p, "input_1")
        return block_of(graph.compile(), SERVER_BODY)

    @pytest.mark.parametrize("type_name, data, expected", [
        ("const-string", {"value": "hello"}, 'print("hello")'),
        ("const-int", {"value": 7}, "print(7)"),
        ("const-float", {"value": 0.25}, "print(0.25)"),
        ("const-bool", {"value": False}, "print(false)"),
        ("const-vector", {"x": 1.0}, "print(Vector(1.0, 0.0, 0.0))"),
        ("const-asset", {}, 'print($"")'),
        ("function-ref", {"functionName": "OnDamaged"}, "print(OnDamaged)"),
        ("string", {"value": "legacy"}, 'print("legacy")'),
    ])
    def test_constants_inline(self, graph, type_name, data, expected):
        const = graph.node(type_name, "const", **data)
        assert self._print(graph, const) == ["    " + expected]

    def test_compare_is_an_inline_expression(self, graph):
        a = graph.node("const-int", "a", value=1)
        b = graph.node("const-int", "b", value=2)
        cmp = graph.node("compare-greater", "cmp")
        graph.wire(a, "output_0", cmp, "input_0")
        graph.wire(b, "output_0", cmp, "input_1")
        assert self._print(graph, cmp) == ["    print((1 > 2))"]

    def test_reroute_passes_the_value_through(self, graph):
        s = graph.node("const-string", "s", value="via")
        r = graph.node("reroute", "r")
        graph.wire(s, "output_0", r, "input_0")
        assert self._print(graph, r) == ['    print("via")']

    def test_math_nodes_use_data_defaults(self, graph):
        m = graph.node("math-multiply", "m", a=3, b=4)
        assert self._print(graph, m) == [
            "    local result0 = 3 * 4",
            "    print(result0)",
        ]

    def test_array_append_binds_the_array(self, graph):
        start = graph.node("init-server", "start")
        arr = graph.node("array-create", "arr")
        five = graph.node("const-int", "five", value=5)
        append = graph.node("array-append", "append")
        length = graph.node("array-length", "length")
        p = graph.node("print", "p")
        graph.then(start, append)
        graph.then(append, p)
        graph.wire(arr, "output_0", append, "input_1")
        graph.wire(five, "output_0", append, "input_2")
        graph.wire(append, "output_1", length, "input_0")
        graph.wire(length, "output_0", p, "input_1")

        assert block_of(graph.compile(), SERVER_BODY) == [
            "    local arr0 = []",
            "    arr0.append(5)",
            "    local len1 = arr0.len()",
            "    print(len1)",
        ]


class TestUnknownType:

    def test_todo_comment_and_best_effort_continuation(self, graph, caplog):
        caplog.set_level(logging.WARNING)
        start = graph.node("init-server", "start")
        odd = graph.node(
            "mystery-node", "odd", label="Mystery",
            inputs=[exec_port("input_0")],
            outputs=[data_port("output_0", "Value"), exec_port("output_1", "Then")],
        )
        p = graph.node("print", "p", message="after")
        graph.then(start, odd)
        graph.then(odd, p, src_port="output_1")

        assert block_of(graph.compile(), SERVER_BODY) == [
            "    // TODO: mystery-node - Mystery",
            '    print("after")',
        ]
        assert "No template for node type 'mystery-node'" in caplog.text
