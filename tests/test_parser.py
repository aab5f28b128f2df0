from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import pytest

from galexpr.builtins import cos, factorial, sin, tan, trunc
from galexpr.entries import (
    DotFunction,
    DotVariable,
    Function,
    ObjectMethod,
    ObjectProperty,
    Variable,
)
from galexpr.operators import Operator
from galexpr.parser import ExpressionError, PartType, build_tree, extract_part, parse
from galexpr.tree import Tree
from galexpr.values import MultiValue, Number, String, TRUE, Undefined


class Thing:
    def thing(self):
        return String("it's a thing!")


@dataclass
class StereoBrand:
    name: str
    country: str


@dataclass
class CarStereo:
    brand: StereoBrand
    max_wattage: int = 0


@dataclass
class FancyType:
    speed: float


@dataclass
class Road:
    type: str


@dataclass
class Car:
    make: str = ""
    speed: int = 0
    max_speed: int = 0
    stereo: Optional[CarStereo] = None
    thinger: Optional[Thing] = field(default=None)

    def get_thinger(self):
        return self.thinger

    def is_running(self) -> bool:
        return True

    def current_speed(self):
        return self.speed

    def current_speed3(self):
        return FancyType(self.speed)

    def get_max_speed(self):
        return self.max_speed

    def till_max_speed(self, speed: int):
        return self.max_speed - speed


def _double(*args):
    if len(args) != 1:
        return Undefined(f"double() requires a single argument, got {len(args)}")
    return args[0].as_number().multiply(Number(2))


def _triple(*args):
    if len(args) != 1:
        return Undefined(f"triple() requires a single argument, got {len(args)}")
    return args[0].as_number().multiply(Number(3))


# ---- extract_part -------------------------------------------------------


def test_extract_part_variable_errors():
    with pytest.raises(ExpressionError):
        extract_part(":var_not_ended")
    with pytest.raises(ExpressionError):
        extract_part(":var with \nblanks:")


def test_extract_part_variable():
    assert extract_part(":var_ended:") == (":var_ended:", PartType.VARIABLE, 11)


def test_extract_part_function_name():
    expr = "f(4+g(5 6 (3+4))+ 6) + k() + (l(9))"
    assert extract_part(expr) == ("f(4+g(5 6 (3+4))+ 6)", PartType.FUNCTION, 20)

    expr = "(4+g(5 6 (3+4))+ 6) + k() + (l(9))"
    assert extract_part(expr) == ("(4+g(5 6 (3+4))+ 6)", PartType.FUNCTION, 19)


@pytest.mark.parametrize("expr", ["f un c ti on   (", "func("])
def test_extract_part_function_errors(expr):
    with pytest.raises(ExpressionError):
        extract_part(expr)


def test_extract_part_operator_chains():
    assert extract_part("+ ++- ---+-- -+2") == ("-", PartType.OPERATOR, 15)
    assert extract_part("+ ++- ---+-- --+2") == ("+", PartType.OPERATOR, 16)


def test_extract_part_number():
    assert extract_part("2") == ("2", PartType.NUMERICAL, 1)
    assert extract_part("2.123") == ("2.123", PartType.NUMERICAL, 5)
    assert extract_part("2.1 2.3") == ("2.1", PartType.NUMERICAL, 3)


def test_extract_part_number_error_message():
    with pytest.raises(ExpressionError) as info:
        extract_part("2.12.3")
    assert str(info.value) == "syntax error: invalid character '.' for number '2.12.'"


def test_extract_part_blank():
    assert extract_part("  \t\n") == ("", PartType.BLANK, 4)


def test_extract_part_string_with_escaped_quote():
    assert extract_part('"a\\"b" + 1') == ('a\\"b', PartType.STRING, 6)


def test_extract_part_unterminated_string():
    with pytest.raises(ExpressionError, match="non-terminated string"):
        extract_part('"abc')


def test_extract_part_bool_and_word_operator():
    assert extract_part("True Or False") == ("True", PartType.BOOL, 4)
    assert extract_part(" Or False") == ("Or", PartType.OPERATOR, 3)
    assert extract_part(" And x") == ("And", PartType.OPERATOR, 4)


def test_extract_part_objects():
    assert extract_part("aCar.Speed - 1") == ("aCar.Speed", PartType.OBJECT_PROPERTY, 10)
    assert extract_part("aCar.Speed()") == ("aCar.Speed()", PartType.OBJECT_METHOD, 12)
    assert extract_part(".Brand.Name") == (".Brand", PartType.OBJECT_ACCESSOR_BY_PROPERTY, 6)
    assert extract_part(".Add(50)") == (".Add(50)", PartType.OBJECT_ACCESSOR_BY_METHOD, 8)


# ---- build_tree ----------------------------------------------------------


def test_build_tree_various_operators():
    tree = build_tree("-10 + 2 * 7 / 2 + 5 ** 4 -8")
    expected = Tree(
        [
            Number(-1),
            Operator.MULTIPLY,
            Number(10),
            Operator.PLUS,
            Number(2),
            Operator.MULTIPLY,
            Number(7),
            Operator.DIVIDE,
            Number(2),
            Operator.PLUS,
            Number(5),
            Operator.POWER,
            Number(4),
            Operator.MINUS,
            Number(8),
        ]
    )
    assert tree == expected


def test_build_tree_plus_minus_string():
    tree = build_tree('"-3 + -4" + -3 --4 / ( 1 + 2+3+4) +tan(10)')
    expected = Tree(
        [
            String("-3 + -4"),
            Operator.MINUS,
            Number(3),
            Operator.PLUS,
            Number(4),
            Operator.DIVIDE,
            Tree(
                [
                    Number(1),
                    Operator.PLUS,
                    Number(2),
                    Operator.PLUS,
                    Number(3),
                    Operator.PLUS,
                    Number(4),
                ]
            ),
            Operator.PLUS,
            Function("tan", tan, [Tree([Number(10)])]),
        ]
    )
    assert tree == expected


def test_build_tree_functions():
    expr = """trunc(
				tan(
					10 + sin(
							cos(
								3 + f(
										1+2
										3
										")4(("
									)
							)
						)
					)
				6
			)"""
    got = parse(expr)
    expected = Tree(
        [
            Function(
                "trunc",
                trunc,
                [
                    Tree(
                        [
                            Function(
                                "tan",
                                tan,
                                [
                                    Tree(
                                        [
                                            Number(10),
                                            Operator.PLUS,
                                            Function(
                                                "sin",
                                                sin,
                                                [
                                                    Tree(
                                                        [
                                                            Function(
                                                                "cos",
                                                                cos,
                                                                [
                                                                    Tree(
                                                                        [
                                                                            Number(3),
                                                                            Operator.PLUS,
                                                                            Function(
                                                                                "f",
                                                                                None,
                                                                                [
                                                                                    Tree([Number(1), Operator.PLUS, Number(2)]),
                                                                                    Tree([Number(3)]),
                                                                                    Tree([String(")4((")]),
                                                                                ],
                                                                            ),
                                                                        ]
                                                                    )
                                                                ],
                                                            )
                                                        ]
                                                    )
                                                ],
                                            ),
                                        ]
                                    )
                                ],
                            )
                        ]
                    ),
                    Tree([Number(6)]),
                ],
            )
        ]
    )
    assert got == expected

    value = got.eval(functions={"f": lambda *args: Number(123)})
    assert value == Number.from_float(5.323784)


def test_build_tree_objects():
    got = parse("aCar.MaxSpeed - aCar.CurrentSpeed()")
    assert got == Tree(
        [
            ObjectProperty("aCar", "MaxSpeed"),
            Operator.MINUS,
            ObjectMethod("aCar", "CurrentSpeed", []),
        ]
    )


def test_build_tree_dot_accessor_function():
    expr = (
        "aCar.CurrentSpeed().Add(50).Add( 10 + (aCar.GetMaxSpeed() + aCar.MaxSpeed) )"
        ".Sub(20) - 100 - Factorial(5).Multiply(2)"
    )
    got = parse(expr)
    expected = Tree(
        [
            ObjectMethod("aCar", "CurrentSpeed", []),
            DotFunction(Function("Add", None, [Tree([Number(50)])])),
            DotFunction(
                Function(
                    "Add",
                    None,
                    [
                        Tree(
                            [
                                Number(10),
                                Operator.PLUS,
                                Tree(
                                    [
                                        ObjectMethod("aCar", "GetMaxSpeed", []),
                                        Operator.PLUS,
                                        ObjectProperty("aCar", "MaxSpeed"),
                                    ]
                                ),
                            ]
                        )
                    ],
                )
            ),
            DotFunction(Function("Sub", None, [Tree([Number(20)])])),
            Operator.MINUS,
            Number(100),
            Operator.MINUS,
            Function("Factorial", factorial, [Tree([Number(5)])]),
            DotFunction(Function("Multiply", None, [Tree([Number(2)])])),
        ]
    )
    assert got == expected

    value = got.eval(objects={"aCar": Car(speed=80, max_speed=200)})
    assert value == Number(180)


def test_build_tree_dot_accessor_property():
    got = parse("aCar.CurrentSpeed3().Speed")
    assert got == Tree(
        [
            ObjectMethod("aCar", "CurrentSpeed3", []),
            DotVariable(Variable("Speed")),
        ]
    )
    value = got.eval(objects={"aCar": Car(speed=100)})
    assert value == Number.from_float(100.0)


def test_build_tree_blank_and_empty():
    assert build_tree("") == Tree()
    assert build_tree("  \t\n ") == Tree()


def test_build_tree_leading_plus_is_dropped():
    assert build_tree("+ 5") == Tree([Number(5)])


def test_build_tree_unknown_word_raises():
    with pytest.raises(ExpressionError) as info:
        build_tree("abc")
    assert str(info.value) == "syntax error: invalid character 'a' for number 'a'"


def test_build_tree_accessor_on_builtin_name_raises():
    with pytest.raises(ExpressionError, match="internal error: invalid object accessor function"):
        build_tree("(2).Floor()")


def test_parse_error_becomes_undefined():
    tree = parse("func(")
    assert tree == Tree([Undefined("syntax error: missing ')' for function arguments '('")])
    assert str(tree.eval()) == "undefined: syntax error: missing ')' for function arguments '('"


# ---- evaluation of parsed expressions -------------------------------------


@pytest.mark.parametrize(
    ("expr", "expected"),
    [
        ("-1 + 2 * 3 / 2 + 3 ** 2 -8", "3"),
        ('-"123"+"100"', "-23"),
        ("1-2+7<<4+5", "3072"),
        ("-1-2-7<<4+5", "-5120"),
        ("-100*2*7+1>>2+3", "-44"),
        ("100*2*7+1>>2+3", "43"),
        ("2+Factorial(4)-5", "21"),
    ],
)
def test_eval(expr, expected):
    assert str(parse(expr).eval()) == expected


def test_eval_with_variables():
    variables = {":var1:": Number(4), ":var2:": Number(3)}
    got = parse("2 + :var1: * :var2: - 5").eval(variables=variables)
    assert got == Number(9)


def test_eval_unknown_variable():
    got = parse("2 + :var1: * :var2: - 5").eval()
    assert got == Undefined("error: unknown user-defined variable ':var1:'")


@pytest.mark.parametrize(
    ("expr", "expected"),
    [
        ("2 > 1", "True"),
        ("2 > 2", "False"),
        ("2 >= 2", "True"),
        ("2 < 1", "False"),
        ("2 < 2", "False"),
        ("2 <= 2", "True"),
        ("2 != 2", "False"),
        ("1 != 2", "True"),
        ("3 != 2", "True"),
        ("2 == 2", "True"),
        ("1 == 2", "False"),
        ("3 == 2", "False"),
        ('( 123 == 123 && 12 <= 45 ) Or ( "a" != "b" )', "True"),
        ('( 123 == 123 && 12 <= 45 ) Or ( "b" != "b" )', "True"),
        ('( 123 == 123 && 12 > 45 ) Or ( "b" == "b" )', "True"),
        ('( 123 == 123 And 12 > 45 ) Or ( "b" != "b" )', "False"),
        ("True Or False", "True"),
        ("True Or (False)", "True"),
        ("True Or(False)", "undefined: error: unknown user-defined function 'Or'"),
    ],
)
def test_eval_boolean(expr, expected):
    assert str(parse(expr).eval()) == expected


def test_with_variables_and_functions():
    parsed = parse("double(:val1:) + triple(:val2:)")

    got = parsed.eval(
        variables={":val1:": Number(4), ":val2:": Number(5)},
        functions={"double": _double, "triple": _triple},
    )
    assert got == Number(23)

    got = parsed.eval(
        variables={":val1:": Number(2), ":val2:": Number(6)},
        functions={
            "double": lambda *args: args[0].as_number().divide(Number(2)),
            "triple": lambda *args: args[0].as_number().divide(Number(3)),
        },
    )
    assert got == Number(3)


def test_nested_functions():
    got = parse("double(triple(7))").eval(functions={"double": _double, "triple": _triple})
    assert str(got) == "42"


def test_multi_value_functions():
    def div(*args):
        if len(args) != 2:
            return Undefined(f"div() requires two arguments, got {len(args)}")
        dividend = args[0].as_number()
        divisor = args[1].as_number()
        quotient = dividend.divide(divisor).as_number().int_part()
        remainder = dividend.sub(quotient.multiply(divisor))
        return MultiValue(quotient, remainder)

    def total(*args):
        margs = args[0] if len(args) == 1 else MultiValue(*args)
        if margs.size() != 2:
            return Undefined("sum() requires two values")
        return margs.get(0).as_number().add(margs.get(1).as_number())

    got = parse("sum(div(triple(7) double(4)))").eval(
        functions={"double": _double, "triple": _triple, "div": div, "sum": total}
    )
    assert str(got) == "7"


def test_strings_with_spaces():
    assert str(parse('"ab cd" + "ef gh"').eval()) == '"ab cdef gh"'


def test_functions_and_strings_with_spaces():
    got = parse('f("ab cd") + f("ef gh")').eval(functions={"f": lambda *args: args[0]})
    assert str(got) == '"ab cdef gh"'


def test_objects_properties():
    parsed = parse("aCar.MaxSpeed - aCar.Speed")
    assert parsed == Tree(
        [
            ObjectProperty("aCar", "MaxSpeed"),
            Operator.MINUS,
            ObjectProperty("aCar", "Speed"),
        ]
    )
    got = parsed.eval(objects={"aCar": Car(make="Lotus Esprit", speed=100, max_speed=250)})
    assert str(got) == "150"


def test_objects_chained_properties():
    parsed = parse('aCar.Stereo.Brand.Name + "::" + aCar.Stereo.Brand.Country')
    assert parsed == Tree(
        [
            ObjectProperty("aCar", "Stereo"),
            DotVariable(Variable("Brand")),
            DotVariable(Variable("Name")),
            Operator.PLUS,
            String("::"),
            Operator.PLUS,
            ObjectProperty("aCar", "Stereo"),
            DotVariable(Variable("Brand")),
            DotVariable(Variable("Country")),
        ]
    )
    car = Car(
        make="Lotus Esprit",
        speed=100,
        max_speed=250,
        stereo=CarStereo(brand=StereoBrand(name="Mitsubishi", country="Japan"), max_wattage=120),
    )
    got = parsed.eval(objects={"aCar": car})
    assert got.as_string().raw_string() == "Mitsubishi::Japan"


def test_objects_properties_two_objects():
    expr = """Road.Type == "Highway"
	And Car.IsRunning()
	And Car.Speed < 100
	And Car.Speed <= Car.MaxSpeed"""
    parsed = parse(expr)
    assert parsed == Tree(
        [
            ObjectProperty("Road", "Type"),
            Operator.EQUAL_TO,
            String("Highway"),
            Operator.AND,
            ObjectMethod("Car", "IsRunning", []),
            Operator.AND,
            ObjectProperty("Car", "Speed"),
            Operator.LESS_THAN,
            Number(100),
            Operator.AND,
            ObjectProperty("Car", "Speed"),
            Operator.LESS_THAN_OR_EQUAL,
            ObjectProperty("Car", "MaxSpeed"),
        ]
    )
    got = parsed.eval(
        objects={
            "Car": Car(make="Lotus Esprit", speed=80, max_speed=250),
            "Road": Road(type="Highway"),
        }
    )
    assert got == TRUE


def test_objects_methods():
    got = parse("aCar.MaxSpeed - aCar.CurrentSpeed()").eval(
        objects={"aCar": Car(speed=100, max_speed=250)}
    )
    assert str(got) == "150"


def test_objects_chained_methods():
    parsed = parse('aCar.GetThinger().Thing().Add("::with a suffix")')
    assert parsed == Tree(
        [
            ObjectMethod("aCar", "GetThinger", []),
            DotFunction(Function("Thing", None, [])),
            DotFunction(Function("Add", None, [Tree([String("::with a suffix")])])),
        ]
    )
    got = parsed.eval(objects={"aCar": Car(speed=100, max_speed=250, thinger=Thing())})
    assert got.as_string().raw_string() == "it's a thing!::with a suffix"


def test_objects_methods_with_sub_tree():
    got = parse("2 * (aCar.MaxSpeed - aCar.CurrentSpeed())").eval(
        objects={"aCar": Car(speed=100, max_speed=250)}
    )
    assert str(got) == "300"


def test_objects_methods_with_args_sub_tree():
    got = parse("2 * (aCar.MaxSpeed - aCar.TillMaxSpeed(aCar.CurrentSpeed()))").eval(
        objects={"aCar": Car(speed=100, max_speed=250)}
    )
    assert str(got) == "200"


def test_objects_unknown_method():
    got = parse("aCar.MaxSpeed - aCar.Missing()").eval(
        objects={"aCar": Car(speed=100, max_speed=250)}
    )
    assert str(got) == (
        "undefined: error: object 'aCar' method 'Missing': unknown or non-callable member "
        "(check if it has a pointer receiver)"
    )