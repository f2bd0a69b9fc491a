from phyassist.api import create_app
from phyassist.config import ServiceConfig

config = ServiceConfig.from_env()
app = create_app(config)

if config.model is None:
    app.logger.error("OPENAI_API_KEY is missing; /api/feedback will answer 500 until it is set")

# ---------- LOCAL RUN ----------
if __name__ == "__main__":
    app.run(host="0.0.0.0", port=config.port)
