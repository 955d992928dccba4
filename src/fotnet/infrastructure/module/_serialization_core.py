"""
JSON configuration registry for layers and strategies.

Every layer and injected strategy that participates in architecture
save/load exposes `get_config()` and a `from_config(cfg)` classmethod and is
registered by class name with `@register_component()`.

Node format
-----------
{
  "type": "ConvolutionLayer",
  "config": {...},
  "children": { "0": <node>, "1": <node>, ... }
}

Strategies held by a layer (padding, activation, initialization,
optimization) are nested inside the layer's config as nodes of their own.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Type

_COMPONENT_REGISTRY: dict[str, Type[Any]] = {}


def register_component(
    name: Optional[str] = None,
) -> Callable[[Type[Any]], Type[Any]]:
    """
    Decorator to register a component class for JSON deserialization.
    """

    def deco(cls: Type[Any]) -> Type[Any]:
        key = name or cls.__name__
        _COMPONENT_REGISTRY[key] = cls
        return cls

    return deco


def component_to_config(c: Any) -> dict[str, Any]:
    """
    Convert a layer, strategy or network into a JSON-serializable node.
    """
    type_name = c.__class__.__name__

    get_cfg = getattr(c, "get_config", None)
    cfg = get_cfg() if callable(get_cfg) else {}

    children: dict[str, Any] = {}
    layers = getattr(c, "_layers", None)
    if isinstance(layers, list):
        for idx, child in enumerate(layers):
            children[str(idx)] = component_to_config(child)

    return {"type": type_name, "config": cfg, "children": children}


def component_from_config(node: Optional[dict[str, Any]]) -> Any:
    """
    Rebuild a component from a configuration node.

    A `None` node rebuilds to `None`, so optional strategies round-trip.
    """
    if node is None:
        return None

    type_name = str(node["type"])
    if type_name not in _COMPONENT_REGISTRY:
        raise ValueError(
            f"Unknown component type '{type_name}'. "
            f"Register it via @register_component."
        )

    cls = _COMPONENT_REGISTRY[type_name]
    cfg = node.get("config", {}) or {}

    from_cfg = getattr(cls, "from_config", None)
    if callable(from_cfg):
        c = from_cfg(cfg)
    else:
        c = cls(**cfg)

    children = node.get("children", {}) or {}
    if children:
        add = getattr(c, "add", None)
        if not callable(add):
            raise ValueError(
                f"Component '{type_name}' cannot accept children (no add())."
            )
        for key in sorted(children, key=int):
            add(component_from_config(children[key]))

    return c
