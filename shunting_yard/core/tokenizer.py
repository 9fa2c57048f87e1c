"""Split expressions into tokens for the shunting-yard parser."""
from typing import Callable, Iterator, List, Optional, Sequence, Union


Expression = Union[str, Sequence[str]]


class Tokenizer:
    """
    Lazy tokenizer feeding the parser one token at a time.

    Two entry modes:
        - A string is scanned left to right. At each position the longest registered symbol that
          prefixes the remaining input becomes the token, otherwise the single character does.
        - A pre-tokenized sequence is trusted as is, each element being one token.

    In both modes single spaces are dropped, and an operator found at the start of the input or
    right after an opening parenthesis is held as a sign and glued to the following token
    ("-5+3" yields "-5", "+", "3"). An operator following another operator is left alone.

    Examples:
        - "12*(3+4)" -> "1", "2", "*", "(", "3", "+", "4", ")"
        - "(-2)^2"   -> "(", "-2", ")", "^", "2"
    """

    def __init__(
        self,
        symbols: Callable[[], List[str]],
        is_operator: Callable[[str], bool],
        is_left_paren: Callable[[str], bool],
    ):
        """
        :param Callable symbols: Returns the registered symbols in registration order
        :param Callable is_operator: Operator membership test
        :param Callable is_left_paren: Opening parenthesis test
        """
        self._symbols = symbols
        self._is_operator = is_operator
        self._is_left_paren = is_left_paren

    @staticmethod
    def longest_match(expression: str, position: int, symbols: Sequence[str]) -> Optional[str]:
        """
        Find the longest symbol starting at ``position``.

        Among equally long matches the first one in ``symbols`` wins.

        :param str expression: Input being scanned
        :param int position: Scan position
        :param Sequence[str] symbols: Candidate symbols

        :return: Matched symbol, or None
        :rtype: Optional[str]
        """
        match: Optional[str] = None
        for symbol in symbols:
            if expression.startswith(symbol, position) and (match is None or len(symbol) > len(match)):
                match = symbol
        return match

    def _scan(self, expression: str) -> Iterator[str]:
        """Yield raw tokens of a string, before sign folding."""
        symbols = self._symbols()
        position = 0
        while position < len(expression):
            token = self.longest_match(expression, position, symbols) or expression[position]
            position += len(token)
            yield token

    def tokenize(self, expression: Expression) -> Iterator[str]:
        """
        Yield the tokens of an expression string or pre-tokenized sequence.

        :param Expression expression: Raw string or sequence of tokens

        :return: Iterator over tokens, sign-folded
        :rtype: Iterator[str]
        """
        raw_tokens = self._scan(expression) if isinstance(expression, str) else iter(expression)

        sign: Optional[str] = None
        last_token = ""
        for token in raw_tokens:
            if token == " ":
                continue

            if sign is not None:
                token = sign + token
                sign = None
            if self._is_operator(token) and (not last_token or self._is_left_paren(last_token)):
                sign = token
                continue

            last_token = token
            yield token
        # A sign with nothing to fold into is dropped
