import os

from dotenv import load_dotenv

load_dotenv()

# Server settings
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 3001))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# Database settings (SQLite file by default)
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///chat.db")

# Completion provider settings
GROQ_API_KEY = os.getenv("GROQ_API_KEY")
GROQ_API_URL = os.getenv("GROQ_API_URL", "https://api.groq.com/openai/v1/chat/completions")
CHAT_MODEL = os.getenv("CHAT_MODEL", "llama-3.3-70b-versatile")
MODEL_TEMPERATURE = float(os.getenv("MODEL_TEMPERATURE", 0.7))
MODEL_MAX_TOKENS = int(os.getenv("MODEL_MAX_TOKENS", 500))
SYSTEM_PROMPT = os.getenv("SYSTEM_PROMPT")

# Values shipped in sample env files; treated the same as a missing key
PLACEHOLDER_API_KEYS = {"", "YOUR_API_KEY_HERE", "dummy_key_for_build"}
