"""
流水线配置加载

- YAML / JSON 文件（按扩展名识别）
- 环境变量覆盖：OVERPASS_GRID__CELL_SIZE=0.5 -> grid.cell_size = 0.5
- 轻量schema校验（type / required / properties / items / enum / 数值下限）
"""

import json
import os
from pathlib import Path
from typing import Any, Callable, Dict, List, Tuple

import yaml


class ConfigLoadError(Exception):
    """配置文件无法读取或解析"""
    pass


class ConfigValidationError(Exception):
    """配置内容不符合schema"""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__("配置验证失败: " + "; ".join(errors))


def _read_json(handle) -> Any:
    try:
        return json.load(handle)
    except json.JSONDecodeError as e:
        raise ConfigLoadError(f"JSON解析错误: {e}") from e


def _read_yaml(handle) -> Any:
    try:
        return yaml.safe_load(handle)
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"YAML解析错误: {e}") from e


_READERS: Dict[str, Callable[[Any], Any]] = {
    "json": _read_json,
    "yaml": _read_yaml,
}

_SUFFIX_FORMATS = {
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
}

# schema类型名 -> Python类型；bool 不算作数值
_SCHEMA_TYPES = {
    "string": (str,),
    "integer": (int,),
    "number": (int, float),
    "boolean": (bool,),
    "array": (list,),
    "object": (dict,),
    "null": (type(None),),
}


class ConfigLoader:
    """
    配置加载器

    load() 读取文件，load_from_env() 收集环境变量覆盖，merge() 合并两者，
    validate() 按schema返回全部错误而不是遇到第一个就停止。
    """

    NESTED_SEPARATOR = "__"

    def load(self, path: str, format: str = "auto") -> Dict[str, Any]:
        """
        读取配置文件

        Args:
            path: 配置文件路径
            format: "auto"（按扩展名）、"json" 或 "yaml"

        Returns:
            Dict[str, Any]: 顶层映射，空文件返回空字典

        Raises:
            ConfigLoadError: 文件不存在、格式不支持、解析失败或顶层不是映射
        """
        if not os.path.exists(path):
            raise ConfigLoadError(f"配置文件不存在: {path}")

        if format == "auto":
            suffix = Path(path).suffix.lower()
            if suffix not in _SUFFIX_FORMATS:
                raise ConfigLoadError(f"无法自动检测文件格式: {suffix}")
            format = _SUFFIX_FORMATS[suffix]

        reader = _READERS.get(format)
        if reader is None:
            raise ConfigLoadError(f"不支持的配置格式: {format}")

        with open(path, "r", encoding="utf-8") as f:
            config = reader(f)

        if config is None:
            config = {}
        if not isinstance(config, dict):
            raise ConfigLoadError(f"配置文件顶层必须是映射: {path}")
        return config

    def load_from_env(self, prefix: str) -> Dict[str, Any]:
        """
        收集以prefix开头的环境变量

        键名去掉前缀后转小写，"__" 表示下一层；值按YAML标量解析
        （"0.5" -> 0.5，"true" -> True，"[ascending]" -> ["ascending"]）。
        """
        prefix = prefix.lower()
        overrides: Dict[str, Any] = {}

        for key, raw in os.environ.items():
            key = key.lower()
            if not key.startswith(prefix):
                continue
            *parents, leaf = key[len(prefix):].split(self.NESTED_SEPARATOR)
            try:
                value = yaml.safe_load(raw)
            except yaml.YAMLError:
                value = raw

            node = overrides
            for part in parents:
                node = node.setdefault(part, {})
            node[leaf] = value

        return overrides

    @staticmethod
    def merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """递归合并两个映射，override中的值优先，输入不被修改"""
        merged = dict(base)
        for key, value in override.items():
            current = merged.get(key)
            if isinstance(value, dict) and isinstance(current, dict):
                merged[key] = ConfigLoader.merge(current, value)
            else:
                merged[key] = value
        return merged

    def validate(self, config: Dict[str, Any], schema: Dict[str, Any]) -> Tuple[bool, List[str]]:
        """
        按schema校验配置

        Returns:
            Tuple[bool, List[str]]: (是否有效, 错误列表)
        """
        if not schema:
            return True, []
        errors: List[str] = []
        self._check(config, schema, "root", errors)
        return not errors, errors

    def _check(self, value: Any, schema: Dict[str, Any], path: str, errors: List[str]) -> None:
        expected = schema.get("type")
        if expected in _SCHEMA_TYPES:
            numeric = expected in ("integer", "number")
            if (numeric and isinstance(value, bool)) or not isinstance(value, _SCHEMA_TYPES[expected]):
                errors.append(f"字段 '{path}' 类型错误: 期望 {expected}, 实际 {type(value).__name__}")
                return

        if "enum" in schema and value not in schema["enum"]:
            errors.append(f"字段 '{path}' 取值无效: {value!r}, 有效值: {schema['enum']}")

        if isinstance(value, (int, float)) and not isinstance(value, bool):
            if "minimum" in schema and value < schema["minimum"]:
                errors.append(f"字段 '{path}' 小于最小值 {schema['minimum']}: {value}")
            if "exclusiveMinimum" in schema and value <= schema["exclusiveMinimum"]:
                errors.append(f"字段 '{path}' 必须大于 {schema['exclusiveMinimum']}: {value}")

        if isinstance(value, dict):
            errors.extend(
                f"缺少必需字段: {path}.{name}"
                for name in schema.get("required", []) if name not in value
            )
            for name, sub_schema in schema.get("properties", {}).items():
                if name in value:
                    self._check(value[name], sub_schema, f"{path}.{name}", errors)

        if isinstance(value, list) and "items" in schema:
            if len(value) < schema.get("minItems", 0):
                errors.append(f"字段 '{path}' 至少需要 {schema['minItems']} 项")
            for index, item in enumerate(value):
                self._check(item, schema["items"], f"{path}[{index}]", errors)
