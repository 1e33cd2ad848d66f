"""Grammar parser — recursive descent from tokens to a command model.

The shell's grammar, one rule per function below:

    shell_cmd       := conditional_cmd { (";" | "&") shell_cmd } { "&" }
    conditional_cmd := cmd { ("&&" | "||") conditional_cmd }
    cmd             := { io_redirect } pipeline | pipeline { io_redirect } | "(" shell_cmd ")"
    io_redirect     := { i_redirect } o_redirect | { o_redirect } i_redirect
    i_redirect      := "<" literal
    o_redirect      := ">" literal | ">>" literal
    pipeline        := simple_cmd { "|" pipeline }
    simple_cmd      := literal { literal }

The parser looks one token ahead and never backtracks.  Two primitives
drive everything:

- ``match(symbol)`` — consume the lookahead if it is ``symbol``.
  Returns whether it did; on a miss nothing changes.
- ``expect(symbol)`` — like ``match`` but a miss is a
  ``ShellSyntaxError``, which abandons the whole line.  Because the
  model is only executed after a complete parse, a syntax error late
  in the line never leaves the start of it half-run.

Design choices:
    - **Explicit context** — the lookahead, the last matched token and
      the model under construction live in a ``ParseContext`` handed to
      every rule.  Nothing is global, so parses are independent.
    - **Loops for right recursion** — ``shell_cmd``, ``conditional_cmd``
      and ``pipeline`` are right-recursive in the grammar but iterate
      here, so a very long line cannot exhaust the Python stack.
    - **Groups are captured, not parsed** — ``( ... )`` collects the raw
      tokens up to the *matching* parenthesis (nesting is counted) and
      hands the text to a subshell.
"""

from py_sh.config import ShellConfig
from py_sh.errors import ShellSyntaxError
from py_sh.logging import Logger
from py_sh.model import ChainCondition, Command, CommandModel, PipelineSpec
from py_sh.subshell import subshell_pipeline
from py_sh.tokens import Symbol, TokenStream

_SOURCE = "parser"


class ParseContext:
    """Everything one parse of one line needs to remember.

    Attributes:
        stream: The tokens being consumed.
        model: The command model being filled in.
        matched: Text of the most recently matched token, or None.
        subshell_argv: How parenthesized groups start their interpreter.

    """

    def __init__(
        self,
        stream: TokenStream,
        model: CommandModel,
        *,
        subshell_argv: tuple[str, ...],
        logger: Logger,
    ) -> None:
        """Create a context positioned at the start of ``stream``."""
        self.stream = stream
        self.model = model
        self.matched: str | None = None
        self.subshell_argv = subshell_argv
        self._logger = logger

    @property
    def symbol(self) -> Symbol:
        """Return the lookahead symbol."""
        return self.stream.symbol

    def match(self, expected: Symbol) -> bool:
        """Consume the lookahead if it is ``expected``.

        Returns:
            True if a token was consumed.  On False nothing changed.

        """
        if self.stream.symbol is not expected:
            return False
        if expected is Symbol.END:
            self.matched = None
        else:
            self.matched = self.stream.advance()
        self._logger.debug(f"matched {self.matched!r} as {expected.label}", source=_SOURCE)
        return True

    def expect(self, expected: Symbol) -> str | None:
        """Consume the lookahead, which must be ``expected``.

        Returns:
            The matched token's text (None for end of input).

        Raises:
            ShellSyntaxError: If the lookahead is anything else.

        """
        if not self.match(expected):
            raise ShellSyntaxError(expected, self.stream.symbol)
        return self.matched

    def take(self) -> str:
        """Consume the lookahead whatever it is and return its text.

        Raises:
            ShellSyntaxError: If the input is already exhausted.

        """
        text = self.stream.advance()
        if text is None:
            raise ShellSyntaxError(Symbol.LITERAL, Symbol.END)
        return text


def parse(
    line: str,
    config: ShellConfig | None = None,
    logger: Logger | None = None,
) -> CommandModel:
    """Parse one input line into a command model.

    Args:
        line: The raw line as typed.
        config: Supplies capacity limits and the subshell command.
        logger: Receives token and pipeline traces.

    Returns:
        The model, ready to hand to the sequence executor.

    Raises:
        ShellSyntaxError: If the line does not fit the grammar.
        CapacityError: If the line holds too many pipelines or stages.

    """
    config = config if config is not None else ShellConfig()
    logger = logger if logger is not None else Logger()
    model = CommandModel(max_pipelines=config.max_pipelines, max_stages=config.max_stages)
    ctx = ParseContext(
        TokenStream.from_line(line),
        model,
        subshell_argv=config.subshell_argv,
        logger=logger,
    )
    shell_cmd(ctx)
    for number, spec in enumerate(model):
        logger.info(f"pipeline #{number}: {spec} [{spec.chain}]", source=_SOURCE)
    return model


def shell_cmd(ctx: ParseContext) -> None:
    """``conditional_cmd { (";" | "&") shell_cmd } { "&" }`` then end of input.

    A trailing ``;`` or ``&`` is allowed.  Each ``&`` backgrounds the
    pipeline parsed just before it.
    """
    conditional_cmd(ctx)
    while True:
        if ctx.match(Symbol.AMP):
            _mark_background(ctx)
            trailing = False
            while ctx.match(Symbol.AMP):
                trailing = True
            if trailing:
                break
        elif not ctx.match(Symbol.SEMICOLON):
            break
        if ctx.symbol is Symbol.END:
            break
        conditional_cmd(ctx)
    ctx.expect(Symbol.END)


def conditional_cmd(ctx: ParseContext) -> None:
    """``cmd { ("&&" | "||") conditional_cmd }``.

    The operator is recorded on the pipeline to its *left*: it decides
    whether the pipeline to its right gets to run.
    """
    spec = cmd(ctx)
    while True:
        if ctx.match(Symbol.AND_IF):
            spec.chain = ChainCondition.SKIP_NEXT_ON_FAILURE
        elif ctx.match(Symbol.OR_IF):
            spec.chain = ChainCondition.SKIP_NEXT_ON_SUCCESS
        else:
            return
        spec = cmd(ctx)


def cmd(ctx: ParseContext) -> PipelineSpec:
    """``{ io_redirect } pipeline | pipeline { io_redirect } | "(" shell_cmd ")"``.

    The pipeline is registered in the model before its stages are
    parsed, so capacity errors surface as early as possible.
    """
    if ctx.match(Symbol.LPAREN):
        text = capture_group(ctx)
        return ctx.model.add_pipeline(subshell_pipeline(text, ctx.subshell_argv))

    spec = ctx.model.add_pipeline(PipelineSpec())
    if io_redirect(ctx, spec):
        pipeline(ctx, spec)
    else:
        pipeline(ctx, spec)
        io_redirect(ctx, spec)
    return spec


def capture_group(ctx: ParseContext) -> str:
    """Collect the raw text of a group up to its matching ``)``.

    The opening ``(`` has already been consumed.  Nested parentheses
    are kept in the text and counted so the right ``)`` ends the group.

    Raises:
        ShellSyntaxError: If the input ends first, or the group is empty.

    """
    words: list[str] = []
    depth = 1
    while True:
        if ctx.symbol is Symbol.END:
            ctx.expect(Symbol.RPAREN)
        if ctx.symbol is Symbol.LPAREN:
            depth += 1
        elif ctx.symbol is Symbol.RPAREN:
            depth -= 1
            if depth == 0:
                ctx.expect(Symbol.RPAREN)
                break
        words.append(ctx.take())
    if not words:
        raise ShellSyntaxError(Symbol.LITERAL, Symbol.RPAREN)
    return " ".join(words)


def io_redirect(ctx: ParseContext, spec: PipelineSpec) -> bool:
    """``{ i_redirect } o_redirect | { o_redirect } i_redirect``.

    At most one input and one output redirect, in either order.

    Returns:
        True if at least one redirect was parsed.

    """
    if i_redirect(ctx, spec):
        o_redirect(ctx, spec)
        return True
    if o_redirect(ctx, spec):
        i_redirect(ctx, spec)
        return True
    return False


def i_redirect(ctx: ParseContext, spec: PipelineSpec) -> bool:
    """``"<" literal``."""
    if not ctx.match(Symbol.LESS):
        return False
    spec.input_path = ctx.expect(Symbol.LITERAL)
    return True


def o_redirect(ctx: ParseContext, spec: PipelineSpec) -> bool:
    """``">" literal | ">>" literal``."""
    if ctx.match(Symbol.GREAT):
        spec.append = False
    elif ctx.match(Symbol.DGREAT):
        spec.append = True
    else:
        return False
    spec.output_path = ctx.expect(Symbol.LITERAL)
    return True


def pipeline(ctx: ParseContext, spec: PipelineSpec) -> None:
    """``simple_cmd { "|" pipeline }`` — every stage lands in ``spec``.

    A ``|`` must be followed by another command; ``cmd1 |`` is a
    syntax error.
    """
    ctx.model.add_stage(spec, simple_cmd(ctx))
    while ctx.match(Symbol.PIPE):
        ctx.model.add_stage(spec, simple_cmd(ctx))


def simple_cmd(ctx: ParseContext) -> Command:
    """``literal { literal }``."""
    words = [ctx.expect(Symbol.LITERAL)]
    while ctx.match(Symbol.LITERAL):
        words.append(ctx.matched)
    return Command(argv=tuple(w for w in words if w is not None))


def _mark_background(ctx: ParseContext) -> None:
    """Flag the most recently parsed pipeline as a background job."""
    last = ctx.model.last
    if last is not None:
        last.background = True
