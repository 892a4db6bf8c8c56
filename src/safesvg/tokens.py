class Attr:
    """One attribute of a start tag.

    `space` is the resolved namespace: "" when unprefixed, the bound URI for
    a declared prefix, "xmlns" for namespace declarations, or the raw prefix
    when it was never declared.
    """

    __slots__ = ("local", "qname", "space", "value")

    def __init__(self, space, local, qname, value):
        self.space = space
        self.local = local
        self.qname = qname
        self.value = value

    def __repr__(self):
        return f"Attr({self.qname!r}={self.value!r})"


class Tag:
    __slots__ = ("attrs", "kind", "name", "qname", "space")

    START = 0
    END = 1

    def __init__(self, kind, name, attrs=None, space="", qname=None):
        self.kind = kind
        self.name = name
        self.space = space
        self.qname = qname or name
        self.attrs = attrs if attrs is not None else []

    def __repr__(self):
        slash = "/" if self.kind == Tag.END else ""
        return f"Tag(<{slash}{self.qname}>)"


class CharacterTokens:
    __slots__ = ("data",)

    def __init__(self, data):
        self.data = data


class CommentToken:
    __slots__ = ("data",)

    def __init__(self, data):
        self.data = data


class ProcessingInstruction:
    __slots__ = ("data", "target")

    def __init__(self, target, data=""):
        self.target = target
        self.data = data


class Directive:
    """A ``<!...>`` declaration, reported as its raw text without ``<!`` and ``>``."""

    __slots__ = ("data",)

    def __init__(self, data):
        self.data = data


class EOFToken:
    __slots__ = ()
