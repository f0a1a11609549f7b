# llm_processor_gemini.py
#
# Description:
# This module handles all interactions with the Google Gemini API using the
# `google-genai` SDK. It conforms to the LLMProcessor interface.

import logging
import time
from typing import Type

from google import genai
from google.genai import types, errors
from pydantic import BaseModel

from config import GOOGLE_API_KEY, LLM_TIMEOUT_SECONDS
from llm_processor import LLMProcessor

# Set specific Google Gemini loggers to WARNING level
logging.getLogger('google.genai').setLevel(logging.WARNING)


class GeminiProcessor(LLMProcessor):
    """
    LLM processor for the Google Gemini API using the `google-genai` SDK.
    """

    def __init__(self, api_key: str = GOOGLE_API_KEY, timeout: float = LLM_TIMEOUT_SECONDS):
        self.api_key = api_key
        # HttpOptions takes the timeout in milliseconds.
        self.http_options = types.HttpOptions(timeout=int(timeout * 1000))

    def complete_json(self, system_prompt: str, user_prompt: str, response_model: Type[BaseModel],
                      model_name: str) -> str | None:
        """
        Sends the prompts to the Gemini API with a JSON response schema and
        returns the raw text of the answer.
        """
        if not self.api_key:
            logging.error("GOOGLE_API_KEY is not set. Skipping Gemini processing.")
            return None

        start_time = time.time()
        try:
            client = genai.Client(api_key=self.api_key, http_options=self.http_options)

            logging.debug(f"Sending prompt to Google Gemini ({model_name})...")

            config = types.GenerateContentConfig(
                system_instruction=system_prompt,
                response_mime_type="application/json",
                response_schema=response_model,
            )

            if model_name.startswith("models/"):
                model_name = model_name.split('/', 1)[1]

            response = client.models.generate_content(
                model=model_name,
                contents=user_prompt,
                config=config,
            )

            if not response.text:
                logging.error(f"Gemini {model_name} returned an empty answer.")
                return None

            logging.info(f"Gemini {model_name} answered in {time.time() - start_time:.2f}s")
            return response.text

        except (errors.APIError, ValueError) as e:
            logging.error(f"Google API call error with model {model_name}: {e}")
            return None
        except Exception as e:
            logging.error(f"An unexpected error occurred with Gemini model {model_name}: {e}")
            return None
