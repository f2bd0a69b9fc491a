from openai import OpenAI

# ---------- PROMPT ----------
PHYASSIST_PROMPT = """
You are PhyAssist, an expert AI tutor for the Singapore A-Level H2 Physics (9749) syllabus.
Your role is to provide formative assessment feedback to a student who has submitted a photo of their handwritten work.
DO NOT give the final answer. Your goal is to guide the student to discover the answer themselves.

Here is the question the student was trying to solve: "{question}"

Analyze the provided image of the student's solution. Your task is to:
1.  Identify the student's method and any correct steps they have taken. Praise them for their correct work.
2.  Pinpoint the specific location of the first conceptual error or calculation mistake.
3.  Provide a clear, concise explanation of WHY it is a mistake. Refer to specific Physics principles.
4.  Provide a scaffolded hint or a guiding question to help the student correct their mistake and figure out the next step.
5.  Format all mathematical equations, symbols, and units using standard LaTeX. Use $...$ for inline math and $$...$$ for display math. Do not use markdown code blocks for equations.
"""


def build_prompt(question: str) -> str:
    return PHYASSIST_PROMPT.format(question=question)


def to_data_url(image_b64: str, mime_type: str) -> str:
    return f"data:{mime_type};base64,{image_b64}"


# ---------- MODEL ----------
class FeedbackModel:
    """Shared handle on the hosted vision model.

    One synchronous call per request: no streaming, and ``max_retries=0`` so a
    provider failure reaches the caller immediately instead of being retried.
    """

    def __init__(self, api_key: str, model: str, timeout: float = 60.0, client=None):
        self.model = model
        self.timeout = timeout
        self._client = client or OpenAI(api_key=api_key, timeout=timeout, max_retries=0)

    def generate(self, question: str, image_b64: str, mime_type: str) -> str:
        completion = self._client.chat.completions.create(
            model=self.model,
            temperature=0.0,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": build_prompt(question)},
                        {"type": "image_url", "image_url": {"url": to_data_url(image_b64, mime_type)}},
                    ],
                }
            ],
        )
        return completion.choices[0].message.content or ""
