# config.py
#
# Description:
# This file contains all the configuration settings for the meal planner.
# By keeping them in one place, it's easy to adjust paths, model names,
# tolerances and prompts without changing the core logic of the engine.

import os

# --- File Paths ---
REQUEST_JSON_PATH = os.environ.get("MEAL_PLAN_REQUEST_PATH", "input/plan_request.json")
PLAN_JSON_PATH = os.environ.get("MEAL_PLAN_OUTPUT_PATH", "output/meal_plan.json")
LOG_FILE_PATH = os.environ.get("MEAL_PLAN_LOG_PATH", "meal_planner.log")

# --- Google Gemini API Settings ---
# IMPORTANT: It's recommended to set your Google API key as an environment
# variable for security.
# How to set an environment variable:
# macOS/Linux: export GOOGLE_API_KEY="your_api_key_here"
# Windows: set GOOGLE_API_KEY="your_api_key_here"
GOOGLE_API_KEY = os.environ.get("GOOGLE_API_KEY", "")

# --- Ollama Settings ---
OLLAMA_HOST = os.environ.get("OLLAMA_HOST", "http://localhost:11434")

# --- LLM Provider Settings ---
# Choose your LLM provider: "local", "google", or "lmstudio".
LLM_PROVIDER = os.environ.get("LLM_PROVIDER", "google")  # Options: "local", "google", "lmstudio"

# --- LLM Model Settings ---
# The first model of the selected provider's list is used for both the plan
# generation and the diet lookup.
LLM_MODELS = {
    "local": [
        "llama3",
        "phi3:mini"
    ],
    "google": [
        "gemini-2.5-flash",
        "gemini-2.5-flash-lite"
    ],
    "lmstudio": [
        "google/gemma-3-12b",
        "qwen/qwen3-4b-thinking-2507",
    ]
}

# A generation call that takes longer than this is treated like a malformed
# response and the fallback plan is used instead.
LLM_TIMEOUT_SECONDS = float(os.environ.get("LLM_TIMEOUT_SECONDS", "90"))

# --- Enforcement Settings ---
# Total servings may exceed the requested count by this many before the
# engine redistributes them.
SERVING_SLACK = 2
# Multiplier applied to the available time before comparing it with the plan.
TIME_MARGIN = 1.0
# Quantity (in grams) given to each ingredient of a dish synthesized from the
# user's own ingredients when sanitization leaves nothing usable.
DEFAULT_SYNTHESIZED_QUANTITY_G = 200

# --- LLM Prompts ---
MEAL_PLAN_SYSTEM_PROMPT = '''
Você é um planejador de marmitas minimalista e prático. Sua única saída é um objeto JSON que segue exatamente o schema fornecido.

REGRAS FIXAS (NÃO NEGOCIÁVEIS):
- NUNCA contradiga as regras de ingredientes e exclusões.
- NUNCA use ingredientes que não estão na lista disponível quando isso for proibido.
- NÃO adicione campos que não existem no schema.
- Siga ESTRITAMENTE o nível de sofisticação:
  * Se SIMPLES: PROÍBA preparos longos (>45min), técnicas avançadas (sous-vide, flambar, reduzir molhos), ingredientes raros e muitos passos (>6 passos por receita).
  * Se GOURMET: ACEITE preparos mais longos, técnicas elaboradas, ingredientes premium e múltiplos componentes.

REGRAS DO PLANO:
{rules}

CÁLCULO DE TEMPO: o totalPrepTime deve considerar tarefas paralelas. Se 2 tarefas de 30min são paralelas, contam como 30min (não 60min).
Para cada passo do prepSchedule inclua "action" (título curto), "details" (passos detalhados para iniciantes) e "tips" (dica prática).

FORMATO DE SAÍDA (JSON):
{{
  "dishes": [
    {{
      "name": "Nome do Prato",
      "category": "completo",
      "ingredients": [{{"name": "ingrediente", "quantity": 500, "unit": "g"}}],
      "steps": ["Passo 1", "Passo 2"],
      "servings": {servings_per_dish},
      "prepTime": 30,
      "variations": ["Variação 1", "Variação 2"],
      "complexity": "simples"
    }}
  ],
  "shoppingList": [{{"category": "Hortifruti", "item": "cenoura", "quantity": 1, "unit": "kg"}}],
  "prepSchedule": [{{"order": 1, "action": "Cozinhar arroz", "duration": 25, "parallel": false, "details": ["..."], "tips": "..."}}],
  "estimatedCost": "baixo",
  "totalPrepTime": 90
}}
'''

DIET_LOOKUP_SYSTEM_PROMPT = '''
Você é um nutricionista rigoroso. Sua tarefa é APENAS dizer se um nome é de uma dieta realmente conhecida e quais são as regras básicas dela.

POLÍTICA ANTI-ALUCINAÇÃO (CRÍTICO):
- Se você NÃO tem informação confiável, científica ou amplamente reconhecida sobre essa dieta, responda {"is_known": false}.
- NÃO invente diretrizes.
- NÃO assuma similaridades com outras dietas.
- Em caso de dúvida, responda que é desconhecida.

Se a dieta for reconhecida, responda:
{"is_known": true, "normalized_label": "Nome Oficial da Dieta", "rules": ["3 a 6 regras curtas que definem a dieta"]}

Responda SOMENTE com o JSON.
'''
