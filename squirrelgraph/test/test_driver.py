import logging

from squirrelgraph.compiler import PLACEHOLDER, compile_graph
from squirrelgraph.compiler.driver import compile_roots, event_root, is_event_node
from squirrelgraph.compiler.emitter import HEADER
from squirrelgraph.compiler.ir import IRNode
from conftest import block_of, exec_port


class TestRootDiscovery:

    def test_root_order_is_server_client_ui_then_events(self, graph):
        graph.node("on-weapon-activate", "ev")
        graph.node("init-ui", "ui")
        graph.node("init-client", "client")
        graph.node("init-server", "server")

        results = compile_roots(graph.ir())
        assert [r.spec.node.id for r in results] == ["server", "client", "ui", "ev"]
        assert [r.spec.guard for r in results] == ["SERVER", "CLIENT", "UI", None]

    def test_only_the_first_init_of_each_type_is_a_root(self, graph):
        first = graph.node("init-server", "first")
        second = graph.node("init-server", "second")
        graph.then(first, graph.node("print", "p1", message="first"))
        graph.then(second, graph.node("print", "p2", message="second"))

        source = graph.compile()
        assert 'print("first")' in source
        assert 'print("second")' not in source
        assert source.count("#if SERVER") == 1

    def test_function_names(self, graph):
        graph.node("init-server", "server", functionName="MyMod_Init")
        graph.node("init-client", "client", functionName="")

        source = graph.compile()
        assert "void function MyMod_Init()" in source
        assert "void function ClientCodeCallback_ModInit()" in source

    def test_event_name_falls_back_to_the_type(self):
        node = IRNode("e", "on-custom-thing", category="events", label="Custom")
        assert is_event_node(node)
        assert event_root(node).function_name == "on_custom_thing_handler"

    def test_event_read_for_data_by_an_earlier_pass_is_still_a_root(self, graph):
        start = graph.node("init-server", "start")
        event = graph.node("on-weapon-activate", "event")
        p = graph.node("print", "p")
        handler = graph.node("print", "handler", message="handler ran")
        graph.then(start, p)
        graph.wire(event, "output_1", p, "input_1")
        graph.then(event, handler)

        source = graph.compile()
        assert block_of(source, "void function CodeCallback_ModInit()") == ["    print(null)"]
        assert block_of(source, "void function OnWeaponActivate(entity weapon)") == [
            '    print("handler ran")',
        ]
        assert "global function OnWeaponActivate" in source

    def test_event_walked_by_an_earlier_pass_is_not_a_root(self, graph):
        start = graph.node("init-server", "start")
        event = graph.node("on-weapon-activate", "event", inputs=[exec_port("input_0", "In")])
        graph.then(start, event)
        graph.then(event, graph.node("print", "handler", message="handler ran"))

        source = graph.compile()
        assert "OnWeaponActivate" not in source
        assert 'print("handler ran")' not in source

    def test_catalogued_game_events_are_roots(self, graph):
        graph.node("on-weapon-primary-attack", "attack")
        graph.node("on-projectile-collision", "hit")

        ir = graph.ir()
        assert {n.category for n in ir.nodes} == {"game"}
        assert [r.spec.node.id for r in compile_roots(ir)] == ["attack", "hit"]


class TestEventRoots:

    def test_event_block_with_parameters(self, graph):
        event = graph.node("on-weapon-activate", "event")
        add_mod = graph.node("weapon-add-mod", "add_mod", modName="hopup")
        graph.then(event, add_mod)
        graph.wire(event, "output_1", add_mod, "input_1")

        lines = graph.compile().split("\n")
        i = lines.index("// Event: OnWeaponActivate")
        assert lines[i + 1:i + 5] == [
            "void function OnWeaponActivate(entity weapon)",
            "{",
            '    weapon.AddMod("hopup")',
            "}",
        ]
        assert "#if" not in "\n".join(lines)

    def test_parameter_names_and_types(self, graph):
        graph.node("on-projectile-collision", "event")
        graph.node("on-weapon-primary-attack", "attack")
        source = graph.compile()
        assert "void function OnProjectileCollision(entity projectile, entity hitEnt)" in source
        assert "void function OnWeaponPrimaryAttack(entity weapon, var attackParams)" in source

    def test_empty_event_still_gets_a_block(self, graph):
        graph.node("event", "custom", label="On Round Start", functionName="OnRoundStart")
        source = graph.compile()
        assert block_of(source, "void function OnRoundStart()") == []
        assert "// Event: On Round Start" in source


class TestPreamble:

    def test_global_declarations(self, graph):
        graph.node("init-client", "client")
        graph.node("init-server", "server")
        graph.node("event", "e1", functionName="OnShared")
        graph.node("event", "e2", functionName="OnShared")

        lines = graph.compile().split("\n")
        assert lines[:7] == [
            *HEADER,
            "",
            "global function CodeCallback_ModInit",
            "global function ClientCodeCallback_ModInit",
            "global function OnShared",
            "",
        ]

    def test_graph_without_roots_has_only_the_preamble(self, graph):
        graph.node("print", "lonely")
        assert compile_graph(graph.nodes, graph.connections) == "\n".join([*HEADER, "", ""])

    def test_guarded_block_layout(self, graph):
        graph.node("init-ui", "ui")
        lines = graph.compile().split("\n")
        i = lines.index("#if UI")
        assert lines[i:i + 6] == [
            "#if UI",
            "void function UICodeCallback_ModInit()",
            "{",
            "}",
            "#endif",
            "",
        ]


class TestAbortedPass:

    def _cyclic(self, graph):
        server = graph.node("init-server", "server")
        client = graph.node("init-client", "client")
        a = graph.node("math-add", "a")
        b = graph.node("math-add", "b")
        p = graph.node("print", "p")
        ok = graph.node("print", "ok", message="client ok")
        graph.then(server, p)
        graph.then(client, ok)
        graph.wire(a, "output_0", b, "input_0")
        graph.wire(b, "output_0", a, "input_0")
        graph.wire(a, "output_0", p, "input_1")

    def test_cycle_aborts_only_its_own_root(self, graph, caplog):
        caplog.set_level(logging.ERROR)
        self._cyclic(graph)

        report = graph.report()
        assert block_of(report.source, "void function CodeCallback_ModInit()") == [
            "    // ERROR: cyclic data dependency involving node 'a'",
        ]
        assert block_of(report.source, "void function ClientCodeCallback_ModInit()") == [
            '    print("client ok")',
        ]
        assert not report.ok
        assert [(e.function_name, e.node_id) for e in report.errors] == [
            ("CodeCallback_ModInit", "server"),
        ]
        assert "Aborted pass for CodeCallback_ModInit" in caplog.text

    def test_self_loop(self, graph):
        start = graph.node("init-server", "start")
        n = graph.node("vector-normalize", "n")
        p = graph.node("print", "p")
        graph.then(start, p)
        graph.wire(n, "output_0", n, "input_0")
        graph.wire(n, "output_0", p, "input_1")

        report = graph.report()
        assert report.errors[0].message == "cyclic data dependency involving node 'n'"

    def test_data_chain_too_deep_aborts_only_its_own_root(self, graph, caplog):
        caplog.set_level(logging.ERROR)
        server = graph.node("init-server", "server")
        client = graph.node("init-client", "client")
        p = graph.node("print", "p")
        graph.then(server, p)
        graph.then(client, graph.node("print", "ok", message="client ok"))
        prev = graph.node("reroute", "r0")
        for i in range(1, 5000):
            node = graph.node("reroute", f"r{i}")
            graph.wire(prev, "output_0", node, "input_0")
            prev = node
        graph.wire(prev, "output_0", p, "input_1")

        report = graph.report()
        assert block_of(report.source, "void function CodeCallback_ModInit()") == [
            "    // ERROR: data dependencies below node 'server' are nested too deeply",
        ]
        assert block_of(report.source, "void function ClientCodeCallback_ModInit()") == [
            '    print("client ok")',
        ]
        assert [e.node_id for e in report.errors] == ["server"]
        assert "Aborted pass for CodeCallback_ModInit" in caplog.text


class TestCompileProperties:

    def _shared_graph(self, graph):
        server = graph.node("init-server", "server")
        client = graph.node("init-client", "client")
        players = graph.node("get-all-players", "players")
        count = graph.node("array-length", "count")
        p = graph.node("print", "p")
        graph.then(server, p)
        graph.then(client, p)
        graph.wire(players, "output_0", count, "input_0")
        graph.wire(count, "output_0", p, "input_1")

    def test_empty_graph_returns_the_placeholder(self):
        assert compile_graph([], []) == PLACEHOLDER

    def test_determinism(self, graph):
        self._shared_graph(graph)
        assert graph.compile() == graph.compile()

    def test_root_isolation(self, graph):
        self._shared_graph(graph)
        source = graph.compile()
        expected = [
            "    local players0 = GetPlayerArray()",
            "    local len1 = players0.len()",
            "    print(len1)",
        ]
        assert block_of(source, "void function CodeCallback_ModInit()") == expected
        assert block_of(source, "void function ClientCodeCallback_ModInit()") == expected

    def test_unreachable_nodes_are_not_emitted(self, graph):
        start = graph.node("init-server", "start")
        graph.then(start, graph.node("print", "live", message="live"))
        graph.node("print", "dead", message="dead")
        dead_vec = graph.node("vector-create", "dead_vec")
        graph.then("dead", "live")
        graph.wire(dead_vec, "output_0", "dead", "input_1")

        source = graph.compile()
        assert 'print("dead")' not in source
        assert "Vector(" not in source
