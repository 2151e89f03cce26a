# ==============================================
# HookChain
# ==============================================
#
# PURPOSE:
#   Hold the identifier and response hooks of one database handle
#   as two explicit, ordered lists instead of nested closures, so
#   the order they run in can be read off (and tested) directly.
#
# STEP SIGNATURES:
# ----------------
#   identifier step:  step(value, next_fn, query_context) -> str
#       Runs first-to-last. next_fn continues with the following
#       step; after the last step comes the driver's own quoting.
#
#   response step:    step(result, query_context) -> result
#       Runs first-to-last, each one getting the previous result.
#
# COMPOSITION (see HookChain.compose):
# ------------------------------------
#   identifier_steps = [user wrap_identifier, case mapping]
#   response_steps   = [user post_process_response, case mapping]
#
#   Case mapping sits right above driver quoting for identifiers
#   and gets the last word on result rows.
#
# ==============================================

from typing import Any, Callable, List, Optional

IdentifierStep = Callable[[str, Callable[[str], str], Any], str]
ResponseStep = Callable[[Any, Any], Any]


class HookChain:
    def __init__(
        self,
        identifier_steps: Optional[List[IdentifierStep]] = None,
        response_steps: Optional[List[ResponseStep]] = None
    ):
        self.identifier_steps = list(identifier_steps or [])
        self.response_steps = list(response_steps or [])

    @classmethod
    def compose(
        cls,
        wrap_identifier: Optional[IdentifierStep] = None,
        post_process_response: Optional[ResponseStep] = None,
        mapper=None
    ) -> "HookChain":
        """
        Build a chain from the user's hooks and an optional
        IdentifierMapper. The mapper wraps the user's hooks rather
        than replacing them.
        """
        identifier_steps = []
        response_steps = []
        if wrap_identifier is not None:
            identifier_steps.append(wrap_identifier)
        if post_process_response is not None:
            response_steps.append(post_process_response)
        if mapper is not None:
            identifier_steps.append(mapper.wrap_identifier)
            response_steps.append(mapper.post_process_response)
        return cls(identifier_steps, response_steps)

    def wrap_identifier(
        self,
        value: str,
        terminal: Callable[[str], str],
        query_context: Any = None
    ) -> str:
        steps = self.identifier_steps

        def run(index: int, current: str) -> str:
            if index == len(steps):
                return terminal(current)
            return steps[index](current, lambda v: run(index + 1, v), query_context)

        return run(0, value)

    def post_process_response(self, result: Any, query_context: Any = None) -> Any:
        for step in self.response_steps:
            result = step(result, query_context)
        return result

    def __repr__(self):
        return (
            f"HookChain(identifier_steps={len(self.identifier_steps)}, "
            f"response_steps={len(self.response_steps)})"
        )
