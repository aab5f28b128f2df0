# galexpr

`galexpr` parses and evaluates expressions such as

```
2 + :speed: * 3 - factorial(4)
( 123 == 123 && 12 <= 45 ) Or ( "a" != "b" )
aCar.MaxSpeed - aCar.CurrentSpeed()
```

Numbers are exact decimals. An expression is parsed once into a `Tree` and
can then be evaluated many times with different variables, functions and
objects.

## Installation

```
pip install galexpr
```

To run the test suite, install the `test` extra and run `pytest`:

```
pip install "galexpr[test]"
pytest
```

## Quick start

```python
from galexpr.parser import parse

tree = parse("-1 + 2 * 3 / 2 + 3 ** 2 - 8")
print(tree.eval())          # 3
```

## What an expression may contain

| Element            | Example                          |
|--------------------|----------------------------------|
| numbers            | `42`, `3.14`                     |
| strings            | `"ab cd"`                        |
| booleans           | `True`, `False`                  |
| variables          | `:var1:`                         |
| function calls     | `sqrt(2)`, `trunc(x 6)`          |
| grouping           | `( 1 + 2 ) * 3`                  |
| object properties  | `aCar.Speed`                     |
| object methods     | `aCar.CurrentSpeed()`            |
| chained access     | `aCar.Stereo.Brand.Name`, `pi().add(1)` |

Function arguments are separated by white space: `trunc(sqrt(10) 6)`.
A name written directly before `(` is a function call, so `True Or(False)`
calls a function named `Or` rather than using the `Or` operator.

Operators, from highest to lowest precedence:

1. `**`
2. `*`, `/`, `%`
3. `+`, `-`
4. `<<`, `>>`
5. `<`, `<=`, `==`, `!=`, `>`, `>=`
6. `And`, `&&`, `Or`, `||` (`And` and `Or` are case-sensitive)

Operators of equal precedence are applied left to right. A leading `+` is
dropped and a leading `-` negates what follows; runs such as `--4` collapse
into a single sign. Division keeps 16 decimal places.

Strings can be joined with `+` and compared with the comparison operators.
A string holding a number is used as that number when it stands to the
right of a number, so `-"123" + "100"` gives `-23`.

## Variables and functions

Variables are named with their colons. User functions receive evaluated
values and return a value.

```python
from galexpr.parser import parse
from galexpr.values import Number

tree = parse("double(:val1:) + triple(:val2:)")

def double(*args):
    return args[0].as_number().multiply(Number.from_int(2))

def triple(*args):
    return args[0].as_number().multiply(Number.from_int(3))

result = tree.eval(
    variables={":val1:": Number.from_int(4), ":val2:": Number.from_int(5)},
    functions={"double": double, "triple": triple},
)
print(result)               # 23
```

A function may return a `MultiValue` to hand several values to another
function; read them back with `get(i)` and `size()`.

## Built-in functions

`pi`, `factorial`, `cos`, `sin`, `tan`, `sqrt`, `floor`, `trunc`, `ln`,
`log` and `eval` are always available; their names are case-insensitive.
`trunc`, `ln` and `log` take a precision as their second argument:

```python
from galexpr.parser import parse

print(parse("trunc(sqrt(10) 6)").eval())    # 3.162277
print(parse("factorial(4) + 2").eval())     # 26
```

`eval` calls the `eval()` method of its argument when it has one and
otherwise returns the argument unchanged.

The same functions are importable from `galexpr.builtins` (`eval` under the
name `evaluate`), e.g. `galexpr.builtins.factorial(Number.from_int(10))`;
`builtin_function(name)` looks one up by name.

## Objects

Any Python object can be exposed by name. Properties are read from its
attributes and methods are called with the evaluated arguments. A name such
as `MaxSpeed` is also found as `max_speed`.

```python
from galexpr.parser import parse

class Car:
    def __init__(self, speed, max_speed):
        self.Speed = speed
        self.MaxSpeed = max_speed

    def CurrentSpeed(self):
        return self.Speed

tree = parse("aCar.MaxSpeed - aCar.CurrentSpeed()")
print(tree.eval(objects={"aCar": Car(100, 250)}))   # 150
```

Plain Python `int`, `float`, `Decimal`, `str` and `bool` results are turned
into expression values; other objects are wrapped in an `ObjectValue` so that
further `.Property` or `.Method()` access can continue from them. Arguments
are converted to `int`, `float`, `Decimal`, `str` or `bool` when the method's
parameters are annotated with those types. `galexpr.objects` also offers
`object_get_property` and `object_get_method` for direct use.

## Errors

Evaluation does not raise on bad input: it returns an `Undefined` value
whose text explains what went wrong, for example

```python
from galexpr.parser import parse

print(parse("2 + :missing:").eval())
# undefined: error: unknown user-defined variable ':missing:'
```

`parse` reports syntax errors the same way. To get an exception instead,
build the tree with `galexpr.parser.build_tree`, which raises
`ExpressionError`.

## Values

Results are instances of the classes in `galexpr.values`: `Number`,
`String`, `Bool`, `MultiValue` and `Undefined`. `str()` gives their
display form (strings are shown in double quotes); `String.raw_string()`
gives the bare text, and `Number.to_int()` / `Number.to_float()` convert
to Python numbers. `to_number`, `to_string`, `to_bool` and `to_value`
convert between values and plain Python data.

## What it does not do

`galexpr` is a library only: it has no command-line program. Expressions
have no syntax for lists, indexing or conditionals, and strings support
only joining and comparison.