"""Built-in node templates.

Each template is a node with id 0 whose sockets are numbered 1..k, so the
`process` functions address sockets by position (`node.sockets[k - 1]`) and
keep working after `create_node` renumbers them.
"""

from __future__ import annotations

import asyncio
import hashlib
from typing import Any, Callable, List, Optional, Sequence, Tuple

from ..core.executor import ExecutionContext
from ..core.models import ConfigParameter, Node, SourceOption, Socket
from ..core.params import get_param_value
from ..core.registry import NodeRegistry

CATEGORIES = ["Input", "Math", "Text", "Logic", "Data"]

HASH_ALGORITHMS = ("MD5", "SHA1", "SHA256", "SHA512")

# (title, direction, dataType)
SocketDef = Tuple[str, str, str]


def _template(
    node_type: str,
    title: str,
    category: str,
    sockets: Sequence[SocketDef],
    process: Callable[[ExecutionContext], Any],
    *,
    node_value: Any = None,
    params: Optional[List[ConfigParameter]] = None,
    width: float = 240,
    height: float = 180,
) -> Node:
    return Node(
        id=0,
        category=category,
        title=title,
        nodeType=node_type,
        nodeValue=node_value,
        width=width,
        height=height,
        sockets=[
            Socket(id=offset, title=t, type=direction, nodeId=0, dataType=data_type)
            for offset, (t, direction, data_type) in enumerate(sockets, start=1)
        ],
        configParameters=params,
        process=process,
    )


def _sid(node: Node, offset: int) -> int:
    return node.sockets[offset - 1].id


def _to_number(value: Any) -> float:
    if value is None or value == "" or value is False:
        return 0
    if value is True:
        return 1
    if isinstance(value, (int, float)):
        return value
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        return float(text)


def _is_truthy(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, (str, list, tuple, dict)):
        return len(value) > 0
    return bool(value)


# Input
async def process_constant(ctx: ExecutionContext) -> Any:
    """Output the node's own value."""
    return ctx.node.nodeValue


async def process_image(ctx: ExecutionContext) -> Any:
    """Pass the connected source through, else output the node's value."""
    source = await ctx.get_input_value(_sid(ctx.node, 1))
    return source if source is not None else ctx.node.nodeValue


# Math
async def process_add(ctx: ExecutionContext) -> float:
    a = _to_number(await ctx.get_input_value(_sid(ctx.node, 1)))
    b = _to_number(await ctx.get_input_value(_sid(ctx.node, 2)))
    return a + b


# Text
async def process_text(ctx: ExecutionContext) -> Any:
    """Interpolate `{{input}}` in the node's template text."""
    template = ctx.node.nodeValue
    if not isinstance(template, str):
        return template
    if "{{input}}" not in template:
        return template
    value = await ctx.get_input_value(_sid(ctx.node, 1))
    return template.replace("{{input}}", "" if value is None else str(value))


async def process_join(ctx: ExecutionContext) -> str:
    """Join all non-empty inputs with the separator held in `nodeValue`."""
    separator = str(ctx.node.nodeValue or "")
    separator = separator.replace("(new line)", "\n").replace("\\n", "\n")

    inputs = ctx.node.input_sockets()
    values = await asyncio.gather(*(ctx.get_input_value(s.id) for s in inputs))
    parts = ["" if v is None else str(v) for v in values]
    return separator.join(p for p in parts if p != "")


# Logic
async def process_delay(ctx: ExecutionContext) -> dict:
    value = await ctx.get_input_value(_sid(ctx.node, 1))

    raw = get_param_value(ctx.node, "Delay (ms)", 1000)
    try:
        delay_ms = max(0.0, float(raw))
    except (TypeError, ValueError):
        delay_ms = 1000.0
    if delay_ms > 0:
        await asyncio.sleep(delay_ms / 1000)

    return {_sid(ctx.node, 2): value}


async def process_if_else(ctx: ExecutionContext) -> dict:
    condition = await ctx.get_input_value(_sid(ctx.node, 1))
    true_value = await ctx.get_input_value(_sid(ctx.node, 2))
    false_value = await ctx.get_input_value(_sid(ctx.node, 3))

    if get_param_value(ctx.node, "Strict Mode", False) is True:
        chosen = true_value if condition is True else false_value
    else:
        chosen = true_value if _is_truthy(condition) else false_value
    return {_sid(ctx.node, 4): chosen}


# Data
async def process_hash(ctx: ExecutionContext) -> dict:
    value = await ctx.get_input_value(_sid(ctx.node, 1))
    text = "" if value is None else str(value)

    algorithm = str(get_param_value(ctx.node, "Algorithm", "SHA256")).upper()
    if algorithm not in HASH_ALGORITHMS:
        algorithm = "SHA256"
    digest = hashlib.new(algorithm.lower(), text.encode("utf-8")).hexdigest()
    return {_sid(ctx.node, 2): digest}


def _param(name: str, ptype: str, default: Any, description: str, **extra: Any) -> ConfigParameter:
    return ConfigParameter(
        parameterName=name,
        parameterType=ptype,
        defaultValue=default,
        valueSource="UserInput",
        UIConfigurable=True,
        description=description,
        **extra,
    )


def builtin_templates() -> List[Node]:
    """Fresh copies of every built-in template."""
    return [
        _template(
            "Number",
            "Number",
            "Input",
            [("Output", "output", "number")],
            process_constant,
            node_value=0,
            params=[_param("Number Output", "number", 0, "Constant number to output", isNodeBodyContent=True)],
        ),
        _template(
            "Boolean",
            "Boolean",
            "Input",
            [("Output", "output", "boolean")],
            process_constant,
            node_value=False,
            params=[_param("Boolean Output", "boolean", False, "Constant boolean to output", isNodeBodyContent=True)],
        ),
        _template(
            "Image",
            "Image",
            "Input",
            [("Source", "input", "string"), ("Output", "output", "string")],
            process_image,
            node_value="",
            params=[
                _param("Image Output", "string", "", "Initial image URL or base64 string to output", isNodeBodyContent=True)
            ],
            width=280,
            height=240,
        ),
        _template(
            "Add",
            "Add",
            "Math",
            [("Input A", "input", "number"), ("Input B", "input", "number"), ("Result", "output", "number")],
            process_add,
            node_value=0,
        ),
        _template(
            "Text",
            "Text",
            "Text",
            [("Input", "input", "string"), ("Output", "output", "string")],
            process_text,
            node_value="{{input}}",
            params=[_param("Text Input", "text", "{{input}}", "Text template to interpolate with input", isNodeBodyContent=True)],
            width=380,
            height=220,
        ),
        _template(
            "Join",
            "Join",
            "Text",
            [("Input 1", "input", "unknown"), ("Input 2", "input", "unknown"), ("Output", "output", "string")],
            process_join,
            node_value=" ",
            params=[_param("Text separator", "string", " ", "Separator between inputs", isNodeBodyContent=True)],
            height=230,
        ),
        _template(
            "Delay",
            "Delay",
            "Logic",
            [("Input", "input", "unknown"), ("Output", "output", "unknown")],
            process_delay,
            node_value="1000 ms",
            params=[_param("Delay (ms)", "number", 1000, "How long to wait before passing the value through (in ms).")],
        ),
        _template(
            "IfElse",
            "If/Else",
            "Logic",
            [
                ("Condition", "input", "boolean"),
                ("True", "input", "unknown"),
                ("False", "input", "unknown"),
                ("Output", "output", "unknown"),
            ],
            process_if_else,
            params=[
                _param(
                    "Strict Mode",
                    "boolean",
                    False,
                    "If enabled, only exact `true` or `false` boolean values will be accepted as condition.",
                )
            ],
            width=300,
            height=240,
        ),
        _template(
            "Hash",
            "Hash",
            "Data",
            [("Input", "input", "string"), ("Hash", "output", "string")],
            process_hash,
            node_value="SHA256",
            params=[
                _param(
                    "Algorithm",
                    "string",
                    "SHA256",
                    "Hashing algorithm to use (MD5, SHA1, SHA256, SHA512)",
                    isNodeBodyContent=True,
                    sourceList=[SourceOption(key=a, label=a) for a in HASH_ALGORITHMS],
                )
            ],
            width=380,
            height=220,
        ),
    ]


def register_builtin_nodes(registry: NodeRegistry) -> NodeRegistry:
    """Register the built-in categories and templates into `registry`."""
    registry.register_categories(CATEGORIES)
    for template in builtin_templates():
        registry.register_node(template)
    return registry
