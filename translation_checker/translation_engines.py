import logging
import subprocess
from abc import ABC, abstractmethod
from typing import List, Optional

from openai import OpenAI, OpenAIError
from openai.types.chat import (
    ChatCompletionSystemMessageParam,
    ChatCompletionUserMessageParam
)

from translation_checker.app_config import AppConfig
from translation_checker.exceptions import EngineConfigurationError, EngineError

logger = logging.getLogger(__name__)

SUPPORTED_ENGINES = ('openai', 'claude')


class TranslationEngine(ABC):
    """A machine translation backend."""

    @abstractmethod
    def translate(self, text: str, system_prompt: str) -> str:
        """
        Translate ``text`` following ``system_prompt``.

        Raises:
            EngineError: On transport, authentication or invocation failure.
        """

    @abstractmethod
    def verify_engine(self) -> None:
        """
        Check that the engine is usable.

        Raises:
            EngineError: If credentials are missing or invalid, or the tool is unreachable.
        """


class ClaudeCliEngine(TranslationEngine):
    """Runs the ``claude`` command line tool in print mode."""

    def __init__(self, model: Optional[str] = None, executable: str = 'claude', timeout: Optional[float] = None):
        self.model = model
        self.executable = executable
        self.timeout = timeout

    def build_command(self, text: str, system_prompt: str) -> List[str]:
        command = [self.executable, '-p', text, '--system-prompt', system_prompt]
        if self.model:
            command.extend(['--model', self.model])
        return command

    def _run(self, command: List[str]) -> subprocess.CompletedProcess:
        try:
            return subprocess.run(command, capture_output=True, text=True, timeout=self.timeout, check=False)
        except FileNotFoundError as exc:
            raise EngineError(
                f"Claude CLI '{self.executable}' is not installed or not on PATH."
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise EngineError(f"Claude command timed out after {self.timeout} seconds.") from exc

    def translate(self, text: str, system_prompt: str) -> str:
        result = self._run(self.build_command(text, system_prompt))
        if result.returncode != 0:
            output = "\n".join(part for part in (result.stdout, result.stderr) if part).strip()
            raise EngineError(f"Claude command failed: {output}")
        return result.stdout.strip()

    def verify_engine(self) -> None:
        result = self._run([self.executable, '--version'])
        if result.returncode != 0:
            raise EngineError(
                "Claude CLI is not installed or not available. "
                "Please install it and make sure 'claude --version' works."
            )
        logger.debug("Claude CLI available: %s", result.stdout.strip())


class OpenAIEngine(TranslationEngine):
    """Chat completion backend for the OpenAI API or any compatible endpoint."""

    def __init__(
            self,
            api_key: str,
            model: str,
            api_url: Optional[str] = None,
            temperature: float = 0.8,
            timeout: float = 60.0,
            client: Optional[OpenAI] = None
    ):
        self.model = model
        self.temperature = temperature
        self.timeout = timeout
        self.client = client or OpenAI(api_key=api_key, base_url=api_url)

    def translate(self, text: str, system_prompt: str) -> str:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    ChatCompletionSystemMessageParam(role="system", content=system_prompt),
                    ChatCompletionUserMessageParam(role="user", content=text)
                ],
                temperature=self.temperature,
                timeout=self.timeout,
            )
        except OpenAIError as api_exc:
            raise EngineError(f"OpenAI API error: {api_exc.__class__.__name__} - {api_exc}") from api_exc

        if not response.choices or response.choices[0].message.content is None:
            raise EngineError("Invalid response from OpenAI API")
        return response.choices[0].message.content

    def verify_engine(self) -> None:
        try:
            model = self.client.models.retrieve(self.model, timeout=self.timeout)
        except OpenAIError as api_exc:
            raise EngineError(f"Could not verify model '{self.model}': {api_exc}") from api_exc
        if not getattr(model, 'id', None):
            raise EngineError(f"Unable to verify availability of model '{self.model}'")


def create_engine(config: AppConfig, name: Optional[str] = None, model: Optional[str] = None) -> TranslationEngine:
    """
    Build and verify the engine named ``name`` (defaults to the configured engine).

    Args:
        config: The application configuration.
        name: 'openai' or 'claude'.
        model: Overrides the configured model.

    Returns:
        TranslationEngine: A verified engine ready for use.

    Raises:
        EngineConfigurationError: If the engine is unknown or lacks credentials.
        EngineError: If verification fails.
    """
    engine_name = (name or config.engine).lower()

    if engine_name == 'openai':
        if not config.openai_api_key:
            raise EngineConfigurationError("OPENAI_API_KEY environment variable is not set")
        engine: TranslationEngine = OpenAIEngine(
            api_key=config.openai_api_key,
            model=model or config.model_name,
            api_url=config.openai_api_url,
            temperature=config.temperature,
            timeout=config.request_timeout,
        )
    elif engine_name == 'claude':
        engine = ClaudeCliEngine(model=model or config.claude_model, timeout=config.request_timeout)
    else:
        raise EngineConfigurationError(
            f"Unknown engine '{engine_name}'. Supported engines: {', '.join(SUPPORTED_ENGINES)}"
        )

    engine.verify_engine()
    logger.info("Using %s translation engine.", engine_name)
    return engine
