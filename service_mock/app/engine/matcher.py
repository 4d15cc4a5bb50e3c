"""
Body matcher: evaluates an XPath condition against an XML request body.
"""

from typing import Mapping, Optional, Union

from lxml import etree

from shared.errors import InvalidExpressionError, MalformedBodyError
from shared.logging import get_logger


def document_expression(expression: str) -> str:
    """Wrap ``expression`` so it is evaluated with the document node as context.

    lxml always starts evaluation at the root element. The parent of the
    root element is the document node, and a predicate on it evaluates the
    condition there, coerced with XPath's boolean().
    """
    return f"boolean(..[boolean({expression})])"


class BodyMatcher:
    """Boolean XPath evaluation over request bodies."""

    def __init__(self):
        self.logger = get_logger("mock.body_matcher")
        self._parser = etree.XMLParser(resolve_entities=False, no_network=True)

    def matches(
        self,
        expression: str,
        body: Union[bytes, str],
        namespaces: Optional[Mapping[str, str]] = None,
    ) -> bool:
        """Return True when ``expression`` holds for ``body``.

        Raw bytes are parsed as sent, honouring the XML declaration's
        encoding; text is parsed as UTF-8.

        Raises MalformedBodyError when the body is not XML, and
        InvalidExpressionError when the expression cannot be evaluated.
        """
        document = self._parse(body)
        try:
            result = document.xpath(
                document_expression(expression),
                namespaces=dict(namespaces) if namespaces else None
            )
        except etree.XPathError as e:
            raise InvalidExpressionError(expression, details={"error": str(e)}) from e

        matched = bool(result)
        self.logger.debug("XPath evaluated", xpath=expression, matched=matched)
        return matched

    def _parse(self, body: Union[bytes, str]) -> etree._Element:
        if not body or not body.strip():
            raise MalformedBodyError("Request body is empty")
        if isinstance(body, str):
            body = body.encode("utf-8")
        try:
            return etree.fromstring(body, parser=self._parser)
        except etree.XMLSyntaxError as e:
            raise MalformedBodyError(details={"error": str(e)}) from e
