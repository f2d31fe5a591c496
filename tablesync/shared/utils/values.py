"""
Comparacion de valores de celda sin coercion de tipos.
"""
from numbers import Number
from typing import Any, Iterable, List


def strict_equals(left: Any, right: Any) -> bool:
    """
    Igualdad estricta entre valores de celda.

    - bool solo es igual a bool (True != 1)
    - numeros se comparan por valor (1 == 1.0)
    - "1" != 1
    """
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left is right
    if isinstance(left, Number) and isinstance(right, Number):
        return left == right
    if type(left) is not type(right):
        return False
    return left == right


def as_value_list(values: Any) -> List[Any]:
    """Normaliza un valor suelto o una coleccion de valores a lista."""
    if isinstance(values, (list, tuple, set, frozenset)):
        return list(values)
    return [values]


def matches_any(cell_value: Any, candidates: Iterable[Any]) -> bool:
    """
    True si la celda es igual a alguno de los candidatos.

    Convencion empty-is-false: el candidato False tambien coincide con "".
    """
    for candidate in candidates:
        if strict_equals(cell_value, candidate):
            return True
        if candidate is False and cell_value == "":
            return True
    return False
