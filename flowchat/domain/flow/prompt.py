"""
Prompt capabilities handed to screen builders.

A prompt either turns the turn's raw input into a value or raises a
``PromptSignal`` asking the question. ``TextPrompt`` targets text-only
transports (USSD); ``InteractivePrompt`` targets chat transports that can
show buttons and lists. The transport adapter picks the implementation.
"""
from abc import ABC, abstractmethod
from typing import Dict, Any, List, Optional, Callable, Tuple, Union

from flowchat.domain.errors import FlowContractError
from flowchat.domain.models.conversation import Media
from flowchat.domain.models.signals import PromptSignal, TerminateSignal

Choices = Union[List[Any], Dict[Any, Any]]

MAX_INTERACTIVE_CHOICES = 100
MAX_CHOICE_LENGTH = 100

YES_ANSWERS = {"yes", "y", "1", "true"}
NO_ANSWERS = {"no", "n", "0", "false"}

_NO_MATCH = object()


def _to_int(value: Any) -> int:
    try:
        return int(str(value).strip())
    except ValueError:
        return 0


class BasePrompt(ABC):
    """Capability interface shared by every prompt implementation"""

    def __init__(self, user_input: Optional[str], combine_validation_error: bool = True):
        self.user_input = user_input
        self.combine_validation_error = combine_validation_error

    @property
    def has_input(self) -> bool:
        return self.user_input is not None and str(self.user_input).strip() != ""

    @abstractmethod
    def ask(self, message: str, **kwargs) -> Any:
        """Return the processed input or ask the question"""

    @abstractmethod
    def select(self, message: str, choices: Choices, **kwargs) -> Any:
        """Return the chosen option or present the options"""

    @abstractmethod
    def yes(self, message: str) -> bool:
        """Return True for yes, False for no, or ask the question"""

    def say(self, message: str, media: Optional[Media] = None):
        raise TerminateSignal(message, media=media)

    def _reprompt(
        self,
        error: str,
        message: str,
        choices: Optional[Dict[str, str]] = None,
        media: Optional[Media] = None
    ):
        if self.combine_validation_error:
            error = "\n\n".join([error, message])
        raise PromptSignal(error, choices=choices, media=media)


class TextPrompt(BasePrompt):
    """Prompt for text-only transports; choices are numbered 1..n"""

    def ask(
        self,
        message: str,
        choices: Optional[Dict[str, str]] = None,
        convert: Optional[Callable[[Any], Any]] = None,
        validate: Optional[Callable[[Any], Optional[str]]] = None,
        transform: Optional[Callable[[Any], Any]] = None,
        media: Optional[Media] = None
    ) -> Any:
        if not self.has_input:
            raise PromptSignal(message, choices=choices, media=media)

        value = self.user_input
        if convert:
            value = convert(value)

        if validate:
            error = validate(value)
            if error:
                self._reprompt(error, message, choices, media)

        if transform:
            value = transform(value)
        return value

    def select(self, message: str, choices: Choices, media: Optional[Media] = None) -> Any:
        values, numbered = self._build_select_choices(choices)
        return self.ask(
            message,
            choices=numbered,
            convert=_to_int,
            validate=lambda choice: None if 1 <= choice <= len(values) else "Invalid selection:",
            transform=lambda choice: values[choice - 1],
            media=media
        )

    def yes(self, message: str) -> bool:
        return self.select(message, ["Yes", "No"]) == "Yes"

    @staticmethod
    def _build_select_choices(choices: Choices) -> Tuple[List[Any], Dict[str, str]]:
        if isinstance(choices, dict):
            values = list(choices.keys())
            labels = [str(label) for label in choices.values()]
        elif isinstance(choices, (list, tuple)):
            values = list(choices)
            labels = [str(choice) for choice in choices]
        else:
            raise FlowContractError("choices must be a list or a dict")

        if not values:
            raise FlowContractError("choices cannot be empty")

        numbered = {str(index): label for index, label in enumerate(labels, start=1)}
        return values, numbered


class InteractivePrompt(BasePrompt):
    """Prompt for chat transports; choices are answered by key or label"""

    def ask(
        self,
        message: str,
        convert: Optional[Callable[[Any], Any]] = None,
        validate: Optional[Callable[[Any], Optional[str]]] = None,
        transform: Optional[Callable[[Any], Any]] = None,
        media: Optional[Media] = None
    ) -> Any:
        if not self.has_input:
            raise PromptSignal(message, media=media)
        return self._process_input(self.user_input, message, transform, validate, convert, media=media)

    def select(
        self,
        message: str,
        choices: Choices,
        convert: Optional[Callable[[Any], Any]] = None,
        validate: Optional[Callable[[Any], Optional[str]]] = None,
        transform: Optional[Callable[[Any], Any]] = None,
        media: Optional[Media] = None
    ) -> Any:
        values, keyed = self._build_select_choices(choices)

        if not self.has_input:
            raise PromptSignal(message, choices=keyed, media=media)

        answer = str(self.user_input).strip()
        selected = _NO_MATCH
        for (key, label), value in zip(keyed.items(), values):
            if answer == key or answer == label:
                selected = value
                break

        if selected is _NO_MATCH:
            options = "\n".join(f"{key}: {label}" for key, label in keyed.items())
            self._reprompt(f"Invalid choice. Please select one of:\n{options}", message, keyed, media)

        return self._process_input(selected, message, transform, validate, convert, choices=keyed, media=media)

    def yes(self, message: str) -> bool:
        buttons = {"yes": "Yes", "no": "No"}
        if not self.has_input:
            raise PromptSignal(message, choices=buttons)

        answer = str(self.user_input).strip().lower()
        if answer in YES_ANSWERS:
            return True
        if answer in NO_ANSWERS:
            return False
        self._reprompt("Please answer with Yes or No.", message, buttons)

    def _process_input(
        self,
        value: Any,
        message: str,
        transform: Optional[Callable[[Any], Any]],
        validate: Optional[Callable[[Any], Optional[str]]],
        convert: Optional[Callable[[Any], Any]],
        choices: Optional[Dict[str, str]] = None,
        media: Optional[Media] = None
    ) -> Any:
        if transform:
            value = transform(value)
        if convert:
            value = convert(value)

        # Validation runs on the converted value
        if validate:
            error = validate(value)
            if error:
                self._reprompt(error, message, choices, media)
        return value

    @staticmethod
    def _build_select_choices(choices: Choices) -> Tuple[List[Any], Dict[str, str]]:
        if isinstance(choices, dict):
            values = list(choices.keys())
            keyed = {str(key): str(label) for key, label in choices.items()}
        elif isinstance(choices, (list, tuple)):
            values = list(choices)
            keyed = {str(index): str(choice) for index, choice in enumerate(choices, start=1)}
        else:
            raise FlowContractError("choices must be a list or a dict")

        if not values:
            raise FlowContractError("choices cannot be empty")
        if len(values) > MAX_INTERACTIVE_CHOICES:
            raise FlowContractError(
                f"at most {MAX_INTERACTIVE_CHOICES} choices are supported, got {len(values)}"
            )

        for label in keyed.values():
            if not label.strip():
                raise FlowContractError("choice labels cannot be empty")
            if len(label) > MAX_CHOICE_LENGTH:
                raise FlowContractError(
                    f"choice '{label[:20]}...' is too long ({len(label)} chars), maximum is {MAX_CHOICE_LENGTH}"
                )

        return values, keyed
