from click import ParamType, Context, Parameter
from typing import Any

from .types import KeyValue, KeyStrength



class KeyValueParamType(ParamType):
    name = "key=value"

    def convert(self, value: Any, param: Parameter | None, ctx: Context | None) -> KeyValue:
        try:
            assert isinstance(value, str), f"Expected a string value, got {type(value).__name__}"
            assert "=" in value, f"Expected a key=value pair, got {value!r}"
            [key, value] = value.split("=", 1)
            return KeyValue(key.strip(), value.strip())
        except Exception as e:
            self.fail(
                f"{e}",
                param,
                ctx,
            )


KEY_VALUE = KeyValueParamType()


def to_dict(ctx: Context, param: Parameter, value: Any) -> dict[str, str]:
    result: dict[str, str] = {}
    if value is None:
        return result
    for key_value in value:
        result[key_value.key] = key_value.value
    return result



class KeyStrengthParamType(ParamType):
    name = "bits"

    def convert(self, value: Any, param: Parameter | None, ctx: Context | None) -> KeyStrength:
        try:
            strength = value if isinstance(value, int) else int(str(value).strip())
            assert strength > 0, f"Key strength must be positive, got {strength}"
            return strength
        except Exception as e:
            self.fail(
                f"{e}",
                param,
                ctx,
            )


KEY_STRENGTH = KeyStrengthParamType()
