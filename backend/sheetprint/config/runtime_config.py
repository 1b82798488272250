"""
运行期配置 - 读取 documents/print_runtime.yaml

职责：
- 加载轮询/打印参数/覆盖类别/输出路径等运行参数
- 提供环境变量覆盖机制
- 类型安全的配置访问
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


# 历次版本中最完整的强制覆盖类别清单
DEFAULT_MUST_INCLUDE = [
    "OST_CutOutlines",
    "OST_Doors",
    "OST_Materials",
    "OST_Rooms",
    "OST_FillPatterns",
    "OST_Walls",
    "OST_FilledRegion",
    "OST_WallsCutPattern",
    "OST_WallsDefault",
    "OST_WallsFinish1",
    "OST_WallsFinish2",
    "OST_WallsInsulation",
    "OST_WallsMembrane",
    "OST_WallsProjectionOutlines",
    "OST_WallsStructure",
    "OST_WallsSubstrate",
    "OST_WallsSurfacePattern",
    "OST_StackedWalls",
    "OST_Windows",
]


class PollingConfig(BaseModel):
    """打印完成轮询配置"""

    max_attempts: int = 10
    interval_ms: int = 500

    @property
    def interval_sec(self) -> float:
        return self.interval_ms / 1000.0


class PrintSettingsConfig(BaseModel):
    """打印参数"""

    driver_name: str = "Microsoft Print to PDF"
    color_mode: Literal["color", "grayscale", "black_line"] = "color"
    paper_placement: Literal["center", "offset_from_corner"] = "center"
    zoom_type: Literal["fit_to_page", "zoom"] = "fit_to_page"
    zoom_percent: int = 100
    hide_crop_boundaries: bool = True


class OverrideConfig(BaseModel):
    """临时覆盖过滤器配置"""

    rule_name_prefix: str = "Temp_BlackOverrideFilter"
    excluded_category: str = "OST_RevisionClouds"
    must_include: list[str] = Field(default_factory=lambda: list(DEFAULT_MUST_INCLUDE))
    max_name_suffix: int = 1000


class OutputConfig(BaseModel):
    """输出配置"""

    output_dir: Path = Path("output")
    combined_file_name: str = "COMBINED_REVIT_SHEETS.pdf"


class PolicyConfig(BaseModel):
    """失败策略"""

    # skip: 超时图纸跳过不合并；fail: 超时即中止批次
    on_timeout: Literal["skip", "fail"] = "skip"


class LoggingConfig(BaseModel):
    """日志配置"""

    log_level: str = "INFO"
    log_to_file: bool = False
    log_file: Path = Path("logs/sheetprint.log")


class RuntimeConfig(BaseSettings):
    """运行期配置（支持环境变量覆盖）"""

    runtime_spec_path: Path = Path("documents/print_runtime.yaml")

    # 各子配置
    polling: PollingConfig = Field(default_factory=PollingConfig)
    print_settings: PrintSettingsConfig = Field(default_factory=PrintSettingsConfig)
    overrides: OverrideConfig = Field(default_factory=OverrideConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    policy: PolicyConfig = Field(default_factory=PolicyConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {
        "env_prefix": "SHEETPRINT_",
        "env_nested_delimiter": "__",
        "arbitrary_types_allowed": True,
    }

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> RuntimeConfig:
        """从YAML文件加载配置"""
        path = Path(yaml_path)
        if not path.exists():
            return cls()

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        runtime_opts = data.get("runtime_options", {})

        config = cls(
            runtime_spec_path=path,
            polling=PollingConfig(**cls._extract(runtime_opts, "polling")),
            print_settings=PrintSettingsConfig(**cls._extract(runtime_opts, "print_settings")),
            overrides=OverrideConfig(**cls._extract(runtime_opts, "overrides")),
            output=OutputConfig(**cls._extract(runtime_opts, "output")),
            policy=PolicyConfig(**cls._extract(runtime_opts, "policy")),
            logging=LoggingConfig(**cls._extract(runtime_opts, "logging")),
        )

        config._resolve_paths(base_dir=path.parent)
        return config

    @staticmethod
    def _extract(data: dict[str, Any], key: str) -> dict[str, Any]:
        """提取并展平配置"""
        section = data.get(key) or {}
        result = {}
        for k, v in section.items():
            if isinstance(v, dict) and "default" in v:
                result[k] = v["default"]
            elif not isinstance(v, dict):
                result[k] = v
        return result

    def _resolve_paths(self, base_dir: Path) -> None:
        """解析相对路径配置为绝对路径（基于配置文件所在目录）"""
        if not self.output.output_dir.is_absolute():
            self.output.output_dir = (base_dir / self.output.output_dir).resolve()
        if not self.logging.log_file.is_absolute():
            self.logging.log_file = (base_dir / self.logging.log_file).resolve()

    def get_combined_path(self, output_dir: Path | None = None) -> Path:
        """合并PDF的输出路径"""
        return (output_dir or self.output.output_dir) / self.output.combined_file_name


# 全局配置实例
_config: RuntimeConfig | None = None


def get_config() -> RuntimeConfig:
    """获取全局配置（惰性加载）"""
    global _config
    if _config is None:
        default_path = Path("documents/print_runtime.yaml")
        if not default_path.exists():
            fallback_path = Path("config/print_runtime.yaml")
            if fallback_path.exists():
                default_path = fallback_path
        _config = RuntimeConfig.from_yaml(default_path)
    return _config


def reload_config(yaml_path: str | Path | None = None) -> RuntimeConfig:
    """重新加载配置"""
    global _config
    path = yaml_path or "documents/print_runtime.yaml"
    _config = RuntimeConfig.from_yaml(path)
    return _config
