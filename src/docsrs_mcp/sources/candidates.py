"""Enumerate the entity shapes a path can plausibly denote.

The plausible set depends only on the number of segments:

- 1 segment: the crate root module.
- 2 segments: a module, or an owner-less item (function, struct, trait)
  directly under the crate root.
- 3+ segments: additionally a method on a struct or a trait, using the
  second-to-last segment as the owner.
"""

from docsrs_mcp.models import Candidate, Shape


def candidates_for(segments: list[str]) -> list[Candidate]:
    """Return the candidates for ``segments`` in priority order."""
    if not segments:
        return []

    tree = tuple(segments)
    candidates = [Candidate(Shape.MODULE, module_path=tree)]
    if len(tree) == 1:
        return candidates

    parent, name = tree[:-1], tree[-1]
    candidates.extend(
        Candidate(shape, module_path=parent, name=name)
        for shape in (Shape.FUNCTION, Shape.STRUCT, Shape.TRAIT)
    )
    if len(tree) == 2:
        return candidates

    module, owner = tree[:-2], tree[-2]
    candidates.extend(
        Candidate(shape, module_path=module, owner=owner, name=name)
        for shape in (Shape.METHOD, Shape.TRAIT_METHOD)
    )
    return candidates
