"""
Loads the configured model into LM Studio through `lms load`.
"""

import asyncio
import math
from typing import Optional
from loguru import logger

from .base import LoadOutcome, LoadStatus, ModelLoadError
from .cli_tool import LMSCli, LOAD_TIMEOUT
from ..config.settings import ServerConfig


def format_gpu_option(gpu: Optional[str]) -> Optional[str]:
    """Translate the GPU setting into a `--gpu=` argument.

    "auto" and empty values mean LM Studio's default and produce nothing.
    Anything other than "max" or a ratio in [0.0, 1.0] is logged and
    dropped so that the load still goes ahead.
    """
    if not gpu:
        return None
    value = gpu.strip().lower()
    if value in ("", "auto"):
        return None
    if value == "max":
        return "--gpu=max"

    try:
        ratio = float(value)
    except ValueError:
        ratio = math.nan

    if not 0.0 <= ratio <= 1.0:
        logger.warning(f"Invalid GPU value \"{gpu}\", skipping --gpu option")
        return None

    text = str(int(ratio)) if ratio.is_integer() else repr(ratio)
    return f"--gpu={text}"


def build_load_args(
    model: str,
    gpu: Optional[str] = None,
    context_length: Optional[int] = None,
    identifier: Optional[str] = None,
) -> list[str]:
    """Arguments for `lms`, starting with the `load` subcommand."""
    args = ["load", model]

    gpu_option = format_gpu_option(gpu)
    if gpu_option:
        args.append(gpu_option)
    if context_length:
        args.append(f"--context-length={context_length}")
    if identifier:
        args.append(f"--identifier={identifier}")

    return args


class ModelLoader:
    """Makes sure a model is loaded, loading it only when `lms ps` lacks it."""

    def __init__(self, cli: LMSCli, timeout: float = LOAD_TIMEOUT):
        self.cli = cli
        self.timeout = timeout

    async def is_loaded(self, model: str, identifier: Optional[str] = None) -> bool:
        output = await self.cli.list_loaded()
        if not output:
            return False
        return model in output or (identifier or model) in output

    async def ensure_loaded(self, config: ServerConfig) -> LoadOutcome:
        """Load `config.model` unless it is already listed.

        Raises ModelLoadError when `lms load` fails or times out.
        """
        if await self.is_loaded(config.model, config.model_identifier):
            logger.info(f"Model {config.model} is already loaded")
            return LoadOutcome(LoadStatus.ALREADY_LOADED, config.model)

        args = build_load_args(
            config.model,
            gpu=config.gpu,
            context_length=config.context_length,
            identifier=config.model_identifier,
        )
        logger.info(f"Loading model: {config.model}")

        try:
            result = await self.cli.load(args, timeout=self.timeout)
        except asyncio.TimeoutError:
            raise ModelLoadError(f"Failed to load model: timed out after {self.timeout:g}s")
        except OSError as e:
            raise ModelLoadError(f"Failed to load model: {e}")

        if not result.ok:
            detail = result.stderr.strip() or result.stdout.strip() or "Unknown error"
            raise ModelLoadError(f"Failed to load model: {detail}")

        logger.info(f"Model {config.model} loaded")
        return LoadOutcome(LoadStatus.LOADED, config.model)
