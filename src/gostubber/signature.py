from __future__ import annotations

from .gotypes import Signature
from .model import Func, Var
from .resolver.symbols import ResolvedMethod


def synthesized_name(index: int) -> str:
    """Name given to an unnamed or blank parameter at position `index`."""
    return f"arg{index}"


def model_func(method: ResolvedMethod) -> Func:
    """Model one interface method as ordered params and results.

    Unnamed and `_` params get position-derived names, since both the
    delegating call and the call record need to refer to them. Result names
    are kept as declared (possibly empty).
    """
    sig: Signature = method.signature
    declared = {p.name for p in sig.params if p.name and p.name != "_"}
    last = len(sig.params) - 1

    params: list[Var] = []
    for i, p in enumerate(sig.params):
        name = p.name
        if not name or name == "_":
            name = synthesized_name(i)
            while name in declared:
                name = "_" + name
            declared.add(name)
        params.append(Var(name=name, type=p.type, variadic=sig.variadic and i == last))

    results = [Var(name=r.name, type=r.type) for r in sig.results]
    return Func(name=method.name, params=params, results=results)
