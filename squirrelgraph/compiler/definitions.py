"""
squirrelgraph Compiler: Node Catalogue
=======================================
Port layout and default data for every node type the compiler has a template
for.  The editor normally ships ports and data with each node; the catalogue
fills them in when a hand-written graph JSON leaves them out.

Port ids follow the editor's positional convention: ``input_<n>`` and
``output_<n>``, numbered separately from 0 in the order listed here.

Add an entry here and a template in templates.py for each new node type.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Optional, Tuple

from .ir import DATA, EXEC, IRPort

_PortSpec = Tuple[str, str, Optional[str]]   # (label, kind, dataType)


def _x(label: str) -> _PortSpec:
    return (label, EXEC, None)


def _d(label: str, data_type: str = "any") -> _PortSpec:
    return (label, DATA, data_type)


def _node(
    category: str,
    label: str,
    inputs: List[_PortSpec] = (),
    outputs: List[_PortSpec] = (),
    data: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    return {
        "category": category,
        "label":    label,
        "inputs":   list(inputs),
        "outputs":  list(outputs),
        "data":     dict(data or {}),
    }


def _getter(label: str, in_label: str, out_label: str, out_type: str) -> Dict[str, Any]:
    return _node("game", label, [_d(in_label, "entity")], [_d(out_label, out_type)])


def _setter(label: str, value_label: str, value_type: str, data=None) -> Dict[str, Any]:
    return _node("game", label,
                 [_x("In"), _d("Entity", "entity"), _d(value_label, value_type)],
                 [_x("Out")], data)


def _binary(label: str, category: str, operand_type: str, out_type: str, data=None) -> Dict[str, Any]:
    return _node(category, label,
                 [_d("A", operand_type), _d("B", operand_type)],
                 [_d("Result", out_type)], data)


_ENTRY = {
    "init-server": _node("core-flow", "Init: Server", outputs=[_x("Exec")],
                         data={"functionName": "CodeCallback_ModInit"}),
    "init-client": _node("core-flow", "Init: Client", outputs=[_x("Exec")],
                         data={"functionName": "ClientCodeCallback_ModInit"}),
    "init-ui":     _node("core-flow", "Init: UI", outputs=[_x("Exec")],
                         data={"functionName": "UICodeCallback_ModInit"}),
    "event":       _node("core-flow", "Event: Custom", outputs=[_x("Exec")],
                         data={"functionName": "CustomEvent"}),
    "on-weapon-activate": _node(
        "game", "OnWeaponActivate",
        outputs=[_x("Exec"), _d("Weapon", "entity")],
        data={"functionName": "OnWeaponActivate"}),
    "on-weapon-primary-attack": _node(
        "game", "OnWeaponPrimaryAttack",
        outputs=[_x("Exec"), _d("Weapon", "entity"), _d("AttackParams")],
        data={"functionName": "OnWeaponPrimaryAttack"}),
    "on-projectile-collision": _node(
        "game", "OnProjectileCollision",
        outputs=[_x("Exec"), _d("Projectile", "entity"), _d("HitEnt", "entity")],
        data={"functionName": "OnProjectileCollision"}),
}

_FLOW = {
    "sequence":     _node("core-flow", "Flow: Sequence", [_x("In")],
                          [_x("Out 1"), _x("Out 2"), _x("Out 3")]),
    "branch":       _node("core-flow", "Branch", [_x("In"), _d("Condition", "boolean")],
                          [_x("True"), _x("False")]),
    "delay":        _node("core-flow", "Delay", [_x("In"), _d("Duration", "float")],
                          [_x("Out")], {"duration": 1.0}),
    "wait":         _node("game", "Wait", [_x("In"), _d("Duration", "float")],
                          [_x("Out")], {"duration": 1.0}),
    "loop-for":     _node("core-flow", "For Loop",
                          [_x("In"), _d("Start", "int"), _d("End", "int"), _d("Step", "int")],
                          [_x("Body"), _d("Index", "int"), _x("Done")],
                          {"start": 0, "end": 10, "step": 1}),
    "loop-foreach": _node("core-flow", "For Each", [_x("In"), _d("Array", "array")],
                          [_x("Body"), _d("Element"), _d("Index", "int"), _x("Done")]),
    "loop-while":   _node("core-flow", "While Loop", [_x("In"), _d("Condition", "boolean")],
                          [_x("Body"), _x("Done")]),
    "thread":       _node("game", "Thread (Async)", [_x("In")],
                          [_x("Body"), _x("Continue")]),
    "call-function": _node("core-flow", "Call Function",
                           [_x("In"), _d("Function", "function")], [_x("Out")],
                           {"function": "MyFunction"}),
    "return":       _node("core-flow", "Return", [_x("In")]),
    "reroute-exec": _node("core-flow", "Reroute (Exec)", [_x("In")], [_x("Out")]),
}

_GAME = {
    "entity-take-damage": _node(
        "game", "Entity.TakeDamage",
        [_x("In"), _d("Entity", "entity"), _d("Attacker", "entity"),
         _d("Inflictor", "entity"), _d("Damage", "float"), _d("Damage Type", "int")],
        [_x("Out")], {"damage": 10, "damageType": 0}),
    "radius-damage": _node(
        "game", "RadiusDamage",
        [_x("In"), _d("Origin", "vector"), _d("Attacker", "entity"),
         _d("Inflictor", "entity"), _d("Damage", "float"), _d("Radius", "float")],
        [_x("Out")], {"damage": 50, "radius": 256}),

    "get-origin":       _getter("GetOrigin", "Entity", "Origin", "vector"),
    "set-origin":       _setter("SetOrigin", "Origin", "vector"),
    "get-velocity":     _getter("GetVelocity", "Entity", "Velocity", "vector"),
    "set-velocity":     _setter("SetVelocity", "Velocity", "vector"),
    "get-health":       _getter("GetHealth", "Entity", "Health", "int"),
    "set-health":       _setter("SetHealth", "Health", "int", {"health": 100}),
    "is-valid":         _getter("IsValid", "Entity", "Valid", "boolean"),
    "is-alive":         _getter("IsAlive", "Entity", "Alive", "boolean"),
    "get-weapon-owner": _getter("GetWeaponOwner", "Weapon", "Owner", "entity"),
    "get-active-weapon": _getter("GetActiveWeapon", "Player", "Weapon", "entity"),
    "kill-entity":      _node("game", "Kill", [_x("In"), _d("Entity", "entity")], [_x("Out")]),
    "fire-weapon-bullet": _node("game", "FireWeaponBullet",
                                [_x("In"), _d("Weapon", "entity")], [_x("Out")]),

    "emit-sound-on-entity": _node(
        "game", "EmitSoundOnEntity",
        [_x("In"), _d("Entity", "entity"), _d("Sound", "string")], [_x("Out")],
        {"sound": "sound_name"}),
    "start-particle-on-entity": _node(
        "game", "StartParticleEffectOnEntity",
        [_x("In"), _d("Entity", "entity"), _d("Effect", "asset"), _d("Attachment", "int")],
        [_x("Out"), _d("Handle", "int")],
        {"effect": '$"P_impact_exp_small"', "attachment": 0}),
    "get-all-players": _node("game", "GetPlayerArray", outputs=[_d("Players", "array")]),
}
_GAME["emit-sound"] = _GAME["emit-sound-on-entity"]

_MODS = {
    "register-mod-weapon": _node(
        "mods", "RegisterModWeapon",
        [_x("In"),
         _d("Class Name", "string"), _d("Name", "string"), _d("Hud Icon", "asset"),
         _d("Weapon Type", "string"), _d("Pickup Sound 1p", "string"),
         _d("Pickup Sound 3p", "string"), _d("Tier", "int"), _d("Base Mods", "array"),
         _d("Supported Attachments", "array"), _d("Low Weapon Chance", "float"),
         _d("Med Weapon Chance", "float"), _d("High Weapon Chance", "float"),
         _d("Register In Loot", "boolean")],
        [_x("Out")],
        {
            "className": "mp_weapon_custom",
            "name": "Custom Weapon",
            "hudIcon": '$"rui/weapon_icons/r5/weapon_r97"',
            "weaponType": "smg",
            "pickupSound1p": "",
            "pickupSound3p": "",
            "tier": 1,
            "baseMods": [],
            "supportedAttachments": [],
            "lowWeaponChance": 0.0,
            "medWeaponChance": 0.0,
            "highWeaponChance": 0.0,
            "registerInLoot": True,
        }),
    "precache-weapon": _node("mods", "PrecacheWeapon",
                             [_x("In"), _d("Weapon Class", "string")], [_x("Out")],
                             {"weaponClass": "mp_weapon_custom"}),
    "weapon-add-mod": _node("mods", "Weapon.AddMod",
                            [_x("In"), _d("Weapon", "entity"), _d("Mod Name", "string")],
                            [_x("Out")], {"modName": "mod_name"}),
    "weapon-has-mod": _node("mods", "Weapon.HasMod",
                            [_d("Weapon", "entity"), _d("Mod Name", "string")],
                            [_d("Has Mod", "boolean")], {"modName": "mod_name"}),
    "add-callback": _node("mods", "AddCallback",
                          [_x("In"), _d("Callback Type", "function"), _d("Function", "function")],
                          [_x("Out")],
                          {"callbackType": "AddClientCommandCallback", "function": "MyCallback"}),
}

_MATH = {
    "vector-create":     _node("data", "Make Vector",
                               [_d("X", "float"), _d("Y", "float"), _d("Z", "float")],
                               [_d("Vector", "vector")], {"x": 0.0, "y": 0.0, "z": 0.0}),
    "vector-add":        _binary("Vector Add", "data", "vector", "vector"),
    "vector-normalize":  _node("data", "Normalize", [_d("Vector", "vector")],
                               [_d("Result", "vector")]),
    "math-add":          _binary("Add", "data", "float", "float", {"a": 0, "b": 0}),
    "math-multiply":     _binary("Multiply", "data", "float", "float", {"a": 1, "b": 1}),
    "math-random-float": _node("data", "RandomFloatRange",
                               [_d("Min", "float"), _d("Max", "float")],
                               [_d("Result", "float")], {"min": 0.0, "max": 1.0}),
    "compare-equal":     _binary("Equal", "data", "any", "boolean"),
    "compare-greater":   _binary("Greater", "data", "float", "boolean"),
    "compare-less":      _binary("Less", "data", "float", "boolean"),
}

_DATA = {
    "const-string": _node("data", "String", outputs=[_d("Value", "string")], data={"value": ""}),
    "const-int":    _node("data", "Int", outputs=[_d("Value", "int")], data={"value": 0}),
    "const-float":  _node("data", "Float", outputs=[_d("Value", "float")], data={"value": 0.0}),
    "const-bool":   _node("data", "Bool", outputs=[_d("Value", "boolean")], data={"value": True}),
    "const-vector": _node("data", "Vector", outputs=[_d("Vector", "vector")],
                          data={"x": 0.0, "y": 0.0, "z": 0.0}),
    "const-asset":  _node("data", "Asset", outputs=[_d("Asset", "asset")], data={"value": '$""'}),
    "function-ref": _node("data", "Function Reference", outputs=[_d("Function", "function")],
                          data={"functionName": "MyFunction"}),
    "reroute":      _node("data", "Reroute", [_d("In")], [_d("Out")]),

    "array-create": _node("data", "Array", outputs=[_d("Array", "array")]),
    "array-append": _node("data", "Array Append",
                          [_x("In"), _d("Array", "array"), _d("Element")],
                          [_x("Out"), _d("Array", "array")]),
    "array-get":    _node("data", "Array Get", [_d("Array", "array"), _d("Index", "int")],
                          [_d("Element")], {"index": 0}),
    "array-length": _node("data", "Array Length", [_d("Array", "array")], [_d("Length", "int")]),
    "print":        _node("actions", "Print", [_x("In"), _d("Message", "string")],
                          [_x("Out")], {"message": ""}),
}
# Palette names used by older editor builds.
for _alias, _target in (("string", "const-string"), ("int", "const-int"),
                        ("float", "const-float"), ("bool", "const-bool"),
                        ("vector", "const-vector")):
    _DATA[_alias] = _DATA[_target]


NODE_DEFINITIONS: Dict[str, Dict[str, Any]] = {
    **_ENTRY, **_FLOW, **_GAME, **_MODS, **_MATH, **_DATA,
}

KNOWN_NODE_TYPES: frozenset = frozenset(NODE_DEFINITIONS)

SERVER_INIT = "init-server"
CLIENT_INIT = "init-client"
UI_INIT = "init-ui"
EVENT_TYPES = frozenset({
    "event", "on-weapon-activate", "on-weapon-primary-attack", "on-projectile-collision",
})
EVENT_CATEGORY = "events"


def _ports(prefix: str, specs: List[_PortSpec]) -> List[IRPort]:
    return [
        IRPort(id=f"{prefix}_{i}", label=label, kind=kind, data_type=data_type)
        for i, (label, kind, data_type) in enumerate(specs)
    ]


def default_ports(type_name: str) -> Tuple[List[IRPort], List[IRPort]]:
    """Fresh (inputs, outputs) port lists for a catalogued type, else two empty lists."""
    spec = NODE_DEFINITIONS.get(type_name)
    if spec is None:
        return [], []
    return _ports("input", spec["inputs"]), _ports("output", spec["outputs"])


def default_data(type_name: str) -> Dict[str, Any]:
    spec = NODE_DEFINITIONS.get(type_name)
    return copy.deepcopy(spec["data"]) if spec else {}
