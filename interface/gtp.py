"""
GTP (Go Text Protocol) command and response framing.

Requests are single lines of the form "[id] name [args...]". Responses are
"=id content" on success or "?id content" on failure, terminated by an empty
line. Everything after "#" on a request line is a comment.
"""

from dataclasses import dataclass, field


@dataclass
class Command:
    """
    A parsed GTP request.

    Attributes:
        name: Command name, e.g. "genmove".
        args: Positional arguments.
        id:   Numeric request id, or None when the client sent none.
    """

    name: str
    args: list[str] = field(default_factory=list)
    id: int | None = None

    @classmethod
    def from_string(cls, line: str) -> "Command":
        """
        Parse a request line.

        Control characters other than tab and newline are dropped, tabs
        become spaces, and comments are stripped before tokenizing.

        Args:
            line: Raw request line from the client.

        Returns:
            The parsed command. The name is "" for an empty line.
        """
        line = "".join(ch for ch in line if ch in "\t\n" or ord(ch) >= 32 and ord(ch) != 127)
        line = line.replace("\t", " ").split("#", 1)[0]
        tokens = line.split()

        command_id = None
        if tokens and tokens[0].isdigit():
            command_id = int(tokens.pop(0))

        name = tokens[0] if tokens else ""
        return cls(name=name, args=tokens[1:], id=command_id)

    def __str__(self) -> str:
        parts = [] if self.id is None else [str(self.id)]
        parts.append(self.name)
        parts.extend(self.args)
        return " ".join(parts)


@dataclass
class Response:
    """
    A GTP response.

    Attributes:
        content: Response body without the status character and id.
        error:   True for "?" responses.
        id:      Request id echoed back, or None.
    """

    content: str = ""
    error: bool = False
    id: int | None = None

    @classmethod
    def from_lines(cls, lines: list[str]) -> "Response":
        """
        Parse a response frame (without its terminating empty line).

        Args:
            lines: Frame lines; the first starts with "=" or "?".

        Returns:
            The parsed response. A malformed status line is read as an error.
        """
        if not lines:
            return cls(error=True)

        head, *rest = lines
        error = not head.startswith("=")
        head = head[1:] if head[:1] in ("=", "?") else head

        digits = len(head) - len(head.lstrip("0123456789"))
        command_id = int(head[:digits]) if digits else None
        first = head[digits:].strip()

        return cls(content="\n".join([first, *rest]), error=error, id=command_id)

    def __str__(self) -> str:
        status = "?" if self.error else "="
        command_id = "" if self.id is None else str(self.id)
        content = f" {self.content}" if self.content else ""
        return f"{status}{command_id}{content}"

    def to_frame(self) -> str:
        """Render the response with its terminating empty line."""
        return f"{self}\n\n"
