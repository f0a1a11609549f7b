# llm_processor_lmstudio.py
#
# Description:
# This module handles all interactions with the LM Studio local server.
# It uses the native `lmstudio-python` library and its structured output
# feature, which takes the Pydantic model's schema directly.

import json
import logging
import time
from typing import Type

import lmstudio as lms
from lmstudio import Chat
from pydantic import BaseModel

from llm_processor import LLMProcessor


class LMStudioProcessor(LLMProcessor):
    """
    LLM processor for local models served via the LM Studio.
    """

    def __init__(self, load_config: dict | None = None, inference_config: dict | None = None):
        self.load_config = load_config or {"gpu": {"ratio": 0.9}}
        self.inference_config = inference_config or {"temperature": 0.2}

    def complete_json(self, system_prompt: str, user_prompt: str, response_model: Type[BaseModel],
                      model_name: str) -> str | None:
        """
        Sends the prompts to the LM Studio server and returns the structured
        answer serialized back to JSON text.
        """
        start_time = time.time()
        try:
            with lms.Client() as client:
                logging.debug(f"Sending prompt to LM Studio ({model_name})...")

                try:
                    model = client.llm.model(model_name, config=self.load_config)
                except Exception as load_error:
                    logging.error(f"Failed to get model '{model_name}' in LM Studio: {load_error}")
                    logging.error("Please ensure the model is downloaded and correctly named in your LM Studio library.")
                    return None

                chat = Chat(system_prompt)
                chat.add_user_message(user_prompt)

                prediction = model.respond(
                    chat,
                    response_format=response_model,
                    config=self.inference_config,
                )

                parsed_data = prediction.parsed
                if not parsed_data:
                    logging.error(f"LM Studio {model_name} returned an empty answer.")
                    return None

                logging.info(f"LM Studio {model_name} answered in {time.time() - start_time:.2f}s")
                if isinstance(parsed_data, str):
                    return parsed_data
                return json.dumps(parsed_data, ensure_ascii=False)

        except Exception as e:
            logging.error(f"An unexpected error occurred while calling LM Studio {model_name}: {e}")
            return None
