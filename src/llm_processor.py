# llm_processor.py
#
# Description:
# This module defines the common interface for all LLM processors and provides
# shared functionality like cleaning up the raw text a model answers. It also
# contains the implementation for the local Ollama processor.
#
# A processor only transports prompts and returns the model's raw JSON text.
# Validating that text against the Pydantic models is left to the caller.

import logging
import re
import time
from abc import ABC, abstractmethod
from typing import Type

import ollama
from pydantic import BaseModel

from config import LLM_TIMEOUT_SECONDS, OLLAMA_HOST

_CODE_FENCE = re.compile(r"^\s*```(?:json)?\s*|\s*```\s*$", re.IGNORECASE)


def strip_code_fences(text: str) -> str:
    """
    Removes the ```json ... ``` wrapper some models put around their answer.
    """
    return _CODE_FENCE.sub("", text or "").strip()


class LLMProcessor(ABC):
    """
    Abstract base class for all LLM processors.
    Ensures a consistent interface for requesting structured JSON answers.
    """

    @abstractmethod
    def complete_json(self, system_prompt: str, user_prompt: str, response_model: Type[BaseModel],
                      model_name: str) -> str | None:
        """
        Sends the prompts to the model, constraining the answer to the schema
        of response_model where the backend supports it.

        Args:
            system_prompt: Instructions and output format for the model.
            user_prompt: The concrete request.
            response_model: The Pydantic model the answer should follow.
            model_name: The specific model name to use for processing.

        Returns:
            The raw JSON text of the answer, or None if the call failed or
            the answer was empty.
        """
        pass


class OllamaProcessor(LLMProcessor):
    """
    LLM processor for local models served via the Ollama API.
    """

    def __init__(self, host: str = OLLAMA_HOST, timeout: float = LLM_TIMEOUT_SECONDS):
        self.client = ollama.Client(host=host, timeout=timeout)

    def complete_json(self, system_prompt: str, user_prompt: str, response_model: Type[BaseModel],
                      model_name: str) -> str | None:
        start_time = time.time()
        try:
            logging.debug(f"Sending prompt to Ollama ({model_name})...")

            response = self.client.chat(
                model=model_name,
                messages=[
                    {
                        'role': 'system',
                        'content': system_prompt,
                    },
                    {
                        'role': 'user',
                        'content': user_prompt,
                    }
                ],
                options={
                    "temperature": 0.2
                },
                format=response_model.model_json_schema()
            )

            response_content = response['message']['content']
            if not response_content or not response_content.strip():
                logging.error(f"Ollama model {model_name} returned an empty answer.")
                return None

            logging.info(f"Ollama {model_name} answered in {time.time() - start_time:.2f}s")
            return response_content

        except Exception as e:
            logging.error(f"An unexpected error occurred while calling Ollama {model_name}: {e}")
            return None
