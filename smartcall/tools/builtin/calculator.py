"""Math tool — evaluates arithmetic expressions over a whitelisted AST."""
import ast
import logging
import math
import operator
from typing import Union

from ..registry import register_tool, ToolParam

logger = logging.getLogger(__name__)

Number = Union[int, float]

_MAX_EXPONENT = 1000
# ~3000 decimal digits
_MAX_RESULT_BITS = 10000
_MAX_LENGTH = 500

_BIN_OPS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
}

_UNARY_OPS = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}

_FUNCTIONS = {
    "sqrt": math.sqrt,
    "abs": abs,
    "sin": math.sin,
    "cos": math.cos,
    "tan": math.tan,
    "log": math.log,
    "log10": math.log10,
    "exp": math.exp,
    "round": round,
    "floor": math.floor,
    "ceil": math.ceil,
}

_CONSTANTS = {
    "pi": math.pi,
    "e": math.e,
}


def _check_power(base: Number, exponent: Number):
    """Reject powers whose integer result would exceed _MAX_RESULT_BITS."""
    if abs(exponent) > _MAX_EXPONENT:
        raise ValueError("exponent too large")
    if isinstance(base, int) and isinstance(exponent, int) and exponent > 0:
        if abs(base).bit_length() * exponent > _MAX_RESULT_BITS:
            raise ValueError("result too large")


def _eval_node(node: ast.AST) -> Number:
    if isinstance(node, ast.Expression):
        return _eval_node(node.body)

    if isinstance(node, ast.Constant):
        if isinstance(node.value, bool) or not isinstance(node.value, (int, float)):
            raise ValueError(f"unsupported literal: {node.value!r}")
        return node.value

    if isinstance(node, ast.BinOp) and type(node.op) in _BIN_OPS:
        left = _eval_node(node.left)
        right = _eval_node(node.right)
        if isinstance(node.op, ast.Pow):
            _check_power(left, right)
        return _BIN_OPS[type(node.op)](left, right)

    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPS:
        return _UNARY_OPS[type(node.op)](_eval_node(node.operand))

    if isinstance(node, ast.Name) and node.id in _CONSTANTS:
        return _CONSTANTS[node.id]

    if (
        isinstance(node, ast.Call)
        and isinstance(node.func, ast.Name)
        and node.func.id in _FUNCTIONS
        and not node.keywords
    ):
        args = [_eval_node(arg) for arg in node.args]
        return _FUNCTIONS[node.func.id](*args)

    raise ValueError(f"unsupported syntax: {type(node).__name__}")


def evaluate(expression: str) -> Number:
    """Evaluate an arithmetic expression. ``^`` means power."""
    if len(expression) > _MAX_LENGTH:
        raise ValueError("expression too long")
    tree = ast.parse(expression.replace("^", "**"), mode="eval")
    value = _eval_node(tree)
    if isinstance(value, complex):
        raise ValueError("complex result")
    return value


def format_number(value: Number) -> str:
    if isinstance(value, float):
        if value.is_integer() and abs(value) < 1e15:
            return str(int(value))
        return f"{value:.15g}"
    return str(value)


@register_tool(
    "calculate_math",
    description="计算数学表达式，支持 + - * / ^ 和括号",
    params=[
        ToolParam("expression", description="数学表达式，例如 (5 + 3) * 2 或 sqrt(16)"),
    ],
)
async def calculate_math(expression: str = "", **kwargs) -> dict:
    try:
        result = format_number(evaluate(str(expression)))
    except (SyntaxError, ValueError, TypeError, ZeroDivisionError, OverflowError) as e:
        logger.info(f"Invalid expression {expression!r}: {e}")
        return {"error": "数学表达式无效，请检查语法。"}
    return {"expression": expression, "result": result}
