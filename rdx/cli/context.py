from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import typer

from rdx.core.config import CONFIG_FILENAME, Config, load_config_or_default
from rdx.core.errors import ErrorCode
from rdx.core.result import Err
from rdx.output.console import ConsoleProtocol, RichConsole
from rdx.pipeline.engine import ContainerEngine

CONFIG_ENV_VAR = "RDX_CONFIG"


@dataclass(frozen=True, slots=True)
class CLIContext:
    root: Path
    config: Config
    console: ConsoleProtocol
    engine: ContainerEngine


def config_path(root: Path) -> Path:
    env = os.environ.get(CONFIG_ENV_VAR)
    if env:
        return Path(env).expanduser()
    return root / CONFIG_FILENAME


def build_context() -> CLIContext:
    root = Path.cwd().resolve()
    console = RichConsole()

    result = load_config_or_default(config_path(root))
    if isinstance(result, Err):
        console.error(result.error.message)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    config = result.value.with_env_overrides()
    return CLIContext(
        root=root,
        config=config,
        console=console,
        engine=ContainerEngine(cli=config.build.engine, cwd=root),
    )
