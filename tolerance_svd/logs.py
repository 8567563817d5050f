import logging
from dataclasses import Field, fields, is_dataclass
from typing import Any, Callable, Dict, Optional, Protocol, Union

import numpy as np
import pandas as pd
from rich.console import Console
from rich.logging import RichHandler
from rich.style import Style
from rich.table import Table

# Used by 'to_table' to map the type of a value to a color
# (e.g. str values are printed in cyan).
_TYPE_STYLES = {
    str: Style(color="cyan"),
    int: Style(color="yellow"),
    float: Style(color="green"),
    bool: Style(color="blue"),
    np.ndarray: Style(color="purple"),
    pd.Index: Style(color="magenta"),
}

# default color if the type is not in _TYPE_STYLES
_DEFAULT_STYLE = Style(color="rgb(255,127,80)")

# None values are grey.
_NONE_STYLE = Style(color="grey50")


class DataclassType(Protocol):
    # typing hints protocol for dataclasses, which are not a type:
    # 'def f(a: DataclassType) -> None' stands for 'f(a: dataclass)'.
    __dataclass_fields__: dict[str, Field]
    __dataclass_params__: dict[str, Any]
    __post_init__: Optional[Callable[[], None]]


def _get_value_style(value: Any) -> Style:
    if value is None:
        return _NONE_STYLE
    if isinstance(value, pd.Index):
        return _TYPE_STYLES[pd.Index]
    return _TYPE_STYLES.get(type(value), _DEFAULT_STYLE)


def _get_type_representation(value: Any) -> str:
    # For numpy arrays, the shape and dtype are also indicated.
    # If a type should display more info in to_table, this is the
    # place to edit.
    if isinstance(value, np.ndarray):
        return f"numpy.ndarray(shape={value.shape}, dtype='{value.dtype}')"

    if isinstance(value, pd.Index):
        return f"pandas.Index(size={len(value)})"

    repr_ = str(type(value)).replace("typing.", "")
    return repr_.replace("class ", "").replace("<'", "").replace("'>", "")


def _get_value_representation(value: Any) -> str:
    if isinstance(value, np.ndarray):
        if value.ndim == 1 and value.size <= 8:
            return np.array2string(value, precision=4)
        return f"Array({value.shape})"
    if isinstance(value, pd.Index):
        return ", ".join(str(label) for label in value[:8]) + (
            ", ..." if len(value) > 8 else ""
        )
    return str(value)


def to_table(
    instance: Union[DataclassType, Dict[str, Any]], console: Optional[Console] = None
) -> str:
    """
    Convert a dataclass instance or a dictionary to a formatted table string.
    Useful for informative logging. Based on the "rich" package.

    Parameters
    ----------
    instance:
      The dataclass or dictionary to represent as a table
    console:
      The console used for capturing the output. If None, one will be created.

    Returns
    -------
    A string representing the instance as a formatted table with columns
    for field name, type, and value
    """

    if console is None:
        console = Console()

    if is_dataclass(instance):
        instance = {
            field.name: getattr(instance, field.name) for field in fields(instance)
        }

    if not isinstance(instance, dict):
        raise ValueError("Instance must be a dataclass or a dictionary.")

    table = Table()

    table.add_column("Field", style="bold")
    table.add_column("Type")
    table.add_column("Value")

    for key, value in instance.items():
        table.add_row(
            key,
            _get_type_representation(value),
            _get_value_representation(value),
            style=_get_value_style(value),
        )

    with console.capture() as capture:
        console.print(table)

    return capture.get()


class TableStr:
    """
    Mixin for dataclasses, adding the 'to_table' method. This method returns
    a table string representation of the dataclass, one line per field. Each
    line contains the field name, its type and its value.

    Usage:

    ```
    @dataclass
    class A(TableStr):
      a: int
      b: float

    a = A(a=1, b=2.0)
    logger.info(a.to_table("values of variable a"))
    ```
    """

    # reused over all calls to to_table
    _console = Console()

    def to_table(self, header: Optional[str] = None) -> str:
        """
        Returns a table representation of 'self', 'self' expected to be
        an instance of dataclass.

        Parameters
        ----------
        header
          title that will be included in the table representation

        Returns
        -------
        The table.
        """
        table = to_table(self, console=self._console)  # type: ignore
        if header is None:
            return table
        return header + "\n" + table


def set_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Configure the root logger to print through a rich handler.

    Existing handlers of the root logger are removed, so that calling
    this function several times does not duplicate the output.

    Parameters
    ----------
    level
      logging level of the root logger

    Returns
    -------
    The root logger.
    """
    root = logging.getLogger()
    root.handlers.clear()
    handler = RichHandler(show_path=False, rich_tracebacks=False)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root.addHandler(handler)
    root.setLevel(level)
    return root
