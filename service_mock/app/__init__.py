"""
Mock Service package.

Answers GET/POST calls with pre-recorded response bodies selected by a
rule document, instead of executing real business logic. It provides:

- app.main: FastAPI surface that forwards every request to the dispatcher.
- app.config: Rule model and the XML document loader.
- app.engine: Index, body matcher, resource cache and dispatcher.

Guidelines:
- The rule set is immutable after load; only the resource cache holds state.
- Never proxy to a live backend.
"""
