"""
Fuzzy Control Language (FCL) reader and writer.

Grammar (line oriented, keywords case-sensitive, whitespace insignificant)::

    FUNCTION_BLOCK [name]
    VAR_INPUT
        <name> : REAL;
    END_VAR
    VAR_OUTPUT
        <name> : REAL;
    END_VAR
    FUZZIFY <name>
        TERM <term> := (x, y) (x, y) ...;
    END_FUZZIFY
    DEFUZZIFY <name>
        TERM <term> := (x, y) ...;
        METHOD : COG | COGS | COA;
        DEFAULT := <value>;
    END_DEFUZZIFY
    RULEBLOCK [name]
        AND : MIN | PROD | BDIF;
        OR : MAX | ASUM | BSUM;
        ACT : MIN | PROD;
        ACCU : MAX | BSUM;
        RULE <n> : IF <condition> THEN <variable> IS <term> [WITH <weight>];
    END_RULEBLOCK
    END_FUNCTION_BLOCK

Conditions are ``<variable> IS [NOT] <term>`` joined with AND/OR (AND binds
tighter, both left-associative) and grouped with parentheses. Comments are
``(* ... *)`` and ``// ...``. Variable and term names may contain single spaces;
the writer rejects names that would not read back unchanged.
"""

import logging
import os
import re
from typing import TYPE_CHECKING, Optional, Union

from ..core.base import (
    AccumulationMethod,
    ActivationMethod,
    AndOperator,
    DefuzzificationMethod,
    OrOperator,
    literal_options,
)
from ..core.errors import FCLIOError, FCLParseError, FuzzyConfigurationError
from ..fuzzy.condition import And, Condition, Or, SubCondition
from ..fuzzy.membership import MembershipFunction
from ..fuzzy.rule import Conclusion, Rule
from ..fuzzy.variable import OutputVariable, Variable

if TYPE_CHECKING:
    from ..fuzzy.rulebase import RuleBase

PathLike = Union[str, os.PathLike]

_COMMENT_BLOCK = re.compile(r"\(\*.*?\*\)")
_KEYWORD = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_TERM = re.compile(r"TERM\s+(?P<name>.+?)\s*:=\s*(?P<points>.*)")
_POINT = re.compile(r"\(([^()]*)\)")
_SETTING = re.compile(r"(?P<key>[A-Z]+)\s*:\s*(?P<value>\S+)")
_DEFAULT = re.compile(r"DEFAULT\s*:=\s*(?P<value>.+)")
_RULE = re.compile(r"RULE\s+(?P<number>[^:]+?)\s*:\s*IF\s+(?P<condition>.+?)\s+THEN\s+(?P<conclusion>.+)")
_CONCLUSION = re.compile(r"(?P<variable>.+?)\s+IS\s+(?P<term>.+?)(?:\s+WITH\s+(?P<weight>\S+))?")
_CONDITION_TOKEN = re.compile(r"\(|\)|[^\s()]+")


class _Line:
    """A source line with its 1-based number, comments removed."""

    def __init__(self, number: int, raw: str, text: str):
        self.number = number
        self.raw = raw
        self.text = text

    def error(self, reason: str) -> FCLParseError:
        return FCLParseError(reason, self.number, self.raw)

    @property
    def keyword(self) -> str:
        m = _KEYWORD.match(self.text)
        return m.group(0) if m else ""

    def statement(self) -> str:
        """The line without its terminating semicolon."""
        if not self.text.endswith(";"):
            raise self.error("Missing ';' at end of statement")
        return self.text[:-1].strip()


def _strip_comments(raw: str) -> str:
    text = _COMMENT_BLOCK.sub(" ", raw)
    if "//" in text:
        text = text[: text.index("//")]
    return text.strip()


def _parse_float(line: _Line, value: str, what: str) -> float:
    try:
        return float(value)
    except ValueError:
        raise line.error(f"{what} is not a number: {value!r}") from None


def _parse_term(line: _Line) -> MembershipFunction:
    m = _TERM.fullmatch(line.statement())
    if m is None:
        raise line.error("Expected 'TERM <name> := (x, y) ...;'")
    points_text = m.group("points")
    if points_text.count("(") != points_text.count(")"):
        raise line.error("Unbalanced parentheses in term points")
    if _POINT.sub("", points_text).strip():
        raise line.error("Term points must be written as '(x, y)' pairs")
    term = MembershipFunction(m.group("name"))
    for point in _POINT.findall(points_text):
        coords = point.split(",")
        if len(coords) != 2:
            raise line.error(f"Expected '(x, y)', got '({point})'")
        term.add_data_point(
            _parse_float(line, coords[0].strip(), "x"),
            _parse_float(line, coords[1].strip(), "y"),
        )
    if term.number_of_data_points == 0:
        raise line.error(f"Term {term.name!r} has no points")
    return term


def _parse_setting(line: _Line, options) -> str:
    m = _SETTING.fullmatch(line.statement())
    if m is None:
        raise line.error(f"Expected '{line.keyword} : <value>;'")
    value = m.group("value")
    if value not in literal_options(options):
        allowed = ", ".join(literal_options(options))
        raise line.error(f"Unsupported {m.group('key')} {value!r}; allowed: {allowed}")
    return value


class _ConditionParser:
    """Recursive descent over ``or := and (OR and)*``, ``and := factor (AND factor)*``."""

    def __init__(self, line: _Line, text: str, rule_base: "RuleBase"):
        self.line = line
        self.tokens = _CONDITION_TOKEN.findall(text)
        self.pos = 0
        self.rule_base = rule_base

    def _peek(self) -> Optional[str]:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _take(self) -> Optional[str]:
        tok = self._peek()
        self.pos += 1
        return tok

    def parse(self) -> Condition:
        if not self.tokens:
            raise self.line.error("Empty rule condition")
        condition = self._or()
        if self._peek() is not None:
            raise self.line.error(f"Unexpected {self._peek()!r} in rule condition")
        return condition

    def _or(self) -> Condition:
        condition = self._and()
        while self._peek() == "OR":
            self._take()
            condition = Or(condition, self._and())
        return condition

    def _and(self) -> Condition:
        condition = self._factor()
        while self._peek() == "AND":
            self._take()
            condition = And(condition, self._factor())
        return condition

    def _factor(self) -> Condition:
        if self._peek() == "(":
            self._take()
            condition = self._or()
            if self._take() != ")":
                raise self.line.error("Unbalanced parentheses in rule condition")
            return condition

        var_words = []
        while self._peek() not in (None, "IS", "(", ")", "AND", "OR"):
            var_words.append(self._take())
        if not var_words or self._take() != "IS":
            raise self.line.error("Expected '<variable> IS [NOT] <term>' in rule condition")
        negated = False
        if self._peek() == "NOT":
            self._take()
            negated = True
        term_words = []
        while self._peek() not in (None, "(", ")", "AND", "OR"):
            term_words.append(self._take())
        if not term_words:
            raise self.line.error("Missing term name in rule condition")

        var_name = " ".join(var_words)
        term_name = " ".join(term_words)
        ivar = self.rule_base.get_input_variable(var_name)
        if ivar is None:
            raise self.line.error(f"No input variable named {var_name!r}")
        term_index = ivar.get_term_index(term_name)
        if term_index < 0:
            raise self.line.error(f"Input variable {var_name!r} has no term {term_name!r}")
        return SubCondition(var_name, term_index, negated)


def _parse_rule(line: _Line, rule_base: "RuleBase") -> Rule:
    m = _RULE.fullmatch(line.statement())
    if m is None:
        raise line.error("Expected 'RULE <n> : IF <condition> THEN <conclusion>;'")
    condition = _ConditionParser(line, m.group("condition"), rule_base).parse()

    c = _CONCLUSION.fullmatch(m.group("conclusion"))
    if c is None:
        raise line.error("Expected '<variable> IS <term> [WITH <weight>]' after THEN")
    var_name, term_name = c.group("variable").strip(), c.group("term").strip()
    ovar = rule_base.get_output_variable(var_name)
    if ovar is None:
        raise line.error(f"No output variable named {var_name!r}")
    term_index = ovar.get_term_index(term_name)
    if term_index < 0:
        raise line.error(f"Output variable {var_name!r} has no term {term_name!r}")
    weight = 1.0
    if c.group("weight") is not None:
        weight = _parse_float(line, c.group("weight"), "Rule weight")
    return Rule(condition, Conclusion(var_name, term_index, weight))


def _parse_into(text: str, rule_base: "RuleBase") -> None:
    lines = [
        _Line(number, raw, _strip_comments(raw))
        for number, raw in enumerate(text.splitlines(), 1)
    ]
    config = rule_base.config
    block: Optional[str] = None
    ivar: Optional[Variable] = None
    ovar: Optional[OutputVariable] = None
    last = _Line(len(lines), "<eof>", "")
    described: set[str] = set()

    for line in lines:
        if not line.text:
            continue
        last = line
        kw = line.keyword

        if block is None:
            if kw == "FUNCTION_BLOCK":
                rule_base.name = line.text[len(kw):].strip()
            elif kw == "END_FUNCTION_BLOCK":
                pass
            elif kw in ("VAR_INPUT", "VAR_OUTPUT", "RULEBLOCK"):
                block = kw
            elif kw in ("FUZZIFY", "DEFUZZIFY"):
                name = line.text[len(kw):].strip()
                if name in described:
                    raise line.error(f"Repeated {kw} block for {name!r}")
                described.add(name)
                if kw == "FUZZIFY":
                    ivar = rule_base.get_input_variable(name)
                    if ivar is None:
                        raise line.error(f"FUZZIFY of undeclared input variable {name!r}")
                else:
                    ovar = rule_base.get_output_variable(name)
                    if ovar is None:
                        raise line.error(f"DEFUZZIFY of undeclared output variable {name!r}")
                block = kw
            else:
                raise line.error(f"Unexpected statement {kw or line.text!r}")

        elif block in ("VAR_INPUT", "VAR_OUTPUT"):
            if kw == "END_VAR":
                block = None
                continue
            decl = line.statement()
            if ":" not in decl:
                raise line.error("Expected '<name> : <type>;' in variable declaration")
            name = decl[: decl.index(":")].strip()
            if not name:
                raise line.error("Missing variable name")
            try:
                if block == "VAR_INPUT":
                    rule_base.add_input_variable(Variable(name))
                else:
                    rule_base.add_output_variable(
                        OutputVariable(
                            name,
                            num_discretes=config.num_discretes,
                            defuzzification_method=config.defuzzification_method,
                            default_value=config.default_value,
                        )
                    )
            except FuzzyConfigurationError as e:
                raise line.error(str(e)) from e

        elif block == "FUZZIFY":
            if kw == "END_FUZZIFY":
                logging.debug(f"Parsed input variable {ivar}")
                block, ivar = None, None
            elif kw == "TERM":
                ivar.add_term(_parse_term(line))
            else:
                raise line.error(f"Unexpected statement {kw!r} in FUZZIFY block")

        elif block == "DEFUZZIFY":
            if kw == "END_DEFUZZIFY":
                if not ovar.terms:
                    raise line.error(f"Output variable {ovar.name!r} has no terms")
                ovar.discretize()
                logging.debug(f"Parsed output variable {ovar}")
                block, ovar = None, None
            elif kw == "TERM":
                ovar.add_term(_parse_term(line))
            elif kw == "METHOD":
                ovar.defuzzification_method = _parse_setting(line, DefuzzificationMethod)
            elif kw == "DEFAULT":
                m = _DEFAULT.fullmatch(line.statement())
                if m is None:
                    raise line.error("Expected 'DEFAULT := <value>;'")
                ovar.default_value = _parse_float(line, m.group("value").strip(), "DEFAULT")
            else:
                raise line.error(f"Unexpected statement {kw!r} in DEFUZZIFY block")

        elif block == "RULEBLOCK":
            if kw == "END_RULEBLOCK":
                block = None
            elif kw == "AND":
                rule_base.set_and_operator(_parse_setting(line, AndOperator))
            elif kw == "OR":
                rule_base.set_or_operator(_parse_setting(line, OrOperator))
            elif kw == "ACT":
                rule_base.set_activation_method(_parse_setting(line, ActivationMethod))
            elif kw == "ACCU":
                rule_base.set_accumulation_method(_parse_setting(line, AccumulationMethod))
            elif kw == "RULE":
                rule_base.add_rule(_parse_rule(line, rule_base))
            else:
                raise line.error(f"Unexpected statement {kw!r} in RULEBLOCK")

    if block is not None:
        raise last.error(f"Unterminated {block} block")


def parse_fcl(text: str, rule_base: "RuleBase") -> None:
    """Parse FCL text and add its contents to ``rule_base``.

    The text is parsed into a scratch rule base first, so ``rule_base`` is left
    untouched when the text is malformed.
    """
    scratch = type(rule_base)(rule_base.config)
    scratch.norm = rule_base.norm
    scratch.activation_method = rule_base.activation_method
    scratch.accumulation_method = rule_base.accumulation_method
    _parse_into(text, scratch)

    for name in list(scratch.input_variables) + list(scratch.output_variables):
        if name in rule_base.input_variables or name in rule_base.output_variables:
            raise FuzzyConfigurationError(f"Duplicate variable name {name!r}")
    for ivar in scratch.input_variables.values():
        rule_base.add_input_variable(ivar)
    for ovar in scratch.output_variables.values():
        rule_base.add_output_variable(ovar)
    for rule in scratch.rules:
        rule_base.add_rule(rule)
    rule_base.norm = scratch.norm
    rule_base.activation_method = scratch.activation_method
    rule_base.accumulation_method = scratch.accumulation_method
    if scratch.name:
        rule_base.name = scratch.name


def read_fcl(path: PathLike, rule_base: "RuleBase") -> None:
    logging.info(f"Reading FCL file {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise FCLIOError(os.fspath(path), e) from e
    parse_fcl(text, rule_base)


# Writer


_RESERVED_WORDS = frozenset(
    ("IS", "NOT", "AND", "OR", "IF", "THEN", "WITH", "RULE", "TERM", "METHOD", "DEFAULT")
)
_NAME_FORBIDDEN = re.compile(r"[();:]|//|\s\s|[^\S ]")


def _check_name(name: str, what: str, allow_empty: bool = False) -> None:
    """Reject names that would not read back as the same name."""
    if not name:
        if allow_empty:
            return
        raise FuzzyConfigurationError(f"{what} name must not be empty")
    if name != name.strip() or _NAME_FORBIDDEN.search(name):
        raise FuzzyConfigurationError(
            f"{what} name {name!r} cannot be written as FCL: use single spaces and none of ( ) ; : //"
        )
    reserved = _RESERVED_WORDS.intersection(name.split(" "))
    if reserved or name.split(" ")[0].startswith("END_"):
        raise FuzzyConfigurationError(
            f"{what} name {name!r} cannot be written as FCL: it contains a keyword"
        )


def _check_names(rule_base: "RuleBase") -> None:
    _check_name(rule_base.name, "Function block", allow_empty=True)
    for variable in list(rule_base.input_variables.values()) + list(rule_base.output_variables.values()):
        _check_name(variable.name, "Variable")
        for term in variable.terms:
            _check_name(term.name, f"Term of {variable.name!r}")


def _format_float(value: float) -> str:
    return repr(float(value))


def _format_points(term: MembershipFunction) -> str:
    return " ".join(f"({_format_float(p.x)}, {_format_float(p.y)})" for p in term.points)


def format_condition(condition: Condition, rule_base: "RuleBase") -> str:
    """Inverse of the condition grammar: reading the result back gives an equal tree."""
    if isinstance(condition, SubCondition):
        ivar = rule_base.input_variables[condition.variable]
        term = ivar.get_term(condition.term_index)
        op = "IS NOT" if condition.negated else "IS"
        return f"{condition.variable} {op} {term.name}"

    left = format_condition(condition.left, rule_base)
    right = format_condition(condition.right, rule_base)
    if isinstance(condition, And):
        if isinstance(condition.left, Or):
            left = f"({left})"
        if isinstance(condition.right, (And, Or)):
            right = f"({right})"
        return f"{left} AND {right}"
    if isinstance(condition.right, Or):
        right = f"({right})"
    return f"{left} OR {right}"


def format_conclusion(conclusion: Conclusion, rule_base: "RuleBase") -> str:
    ovar = rule_base.output_variables[conclusion.variable]
    fcl = f"{conclusion.variable} IS {ovar.get_term(conclusion.term_index).name}"
    if conclusion.weight != 1.0:
        fcl += f" WITH {_format_float(conclusion.weight)}"
    return fcl


def format_fcl(rule_base: "RuleBase") -> str:
    """FCL text of ``rule_base``.

    Raises:
        FuzzyConfigurationError: if a variable or term name cannot be expressed in FCL
    """
    _check_names(rule_base)
    lines = [f"FUNCTION_BLOCK {rule_base.name}".rstrip()]

    lines.append("VAR_INPUT")
    for name in rule_base.input_variables:
        lines.append(f"\t{name} :\tREAL;")
    lines.append("END_VAR")

    lines.append("VAR_OUTPUT")
    for name in rule_base.output_variables:
        lines.append(f"\t{name} :\tREAL;")
    lines.append("END_VAR")

    for ivar in rule_base.input_variables.values():
        lines.append(f"FUZZIFY {ivar.name}")
        for term in ivar.terms:
            lines.append(f"\tTERM {term.name} := {_format_points(term)};")
        lines.append("END_FUZZIFY")

    for ovar in rule_base.output_variables.values():
        lines.append(f"DEFUZZIFY {ovar.name}")
        for term in ovar.terms:
            lines.append(f"\tTERM {term.name} := {_format_points(term)};")
        lines.append(f"\tMETHOD : {ovar.defuzzification_method};")
        lines.append(f"\tDEFAULT := {_format_float(ovar.default_value)};")
        lines.append("END_DEFUZZIFY")

    lines.append("RULEBLOCK")
    lines.append(f"\tAND : {rule_base.and_operator};")
    lines.append(f"\tACT : {rule_base.activation_method};")
    lines.append(f"\tACCU : {rule_base.accumulation_method};")
    for i, rule in enumerate(rule_base.rules, 1):
        lines.append(
            f"\tRULE {i} : IF {format_condition(rule.condition, rule_base)} "
            f"THEN {format_conclusion(rule.conclusion, rule_base)};"
        )
    lines.append("END_RULEBLOCK")
    lines.append("END_FUNCTION_BLOCK")
    return "\n".join(lines) + "\n"


def write_fcl(rule_base: "RuleBase", path: PathLike) -> None:
    text = format_fcl(rule_base)
    logging.info(f"Writing FCL file {path}")
    try:
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)
    except OSError as e:
        raise FCLIOError(os.fspath(path), e) from e
