from flask import Flask, request, render_template_string
from werkzeug.exceptions import RequestEntityTooLarge

from phyassist.client import FeedbackClient
from phyassist.config import ClientConfig
from phyassist.render import render_feedback
from phyassist.submission import Submission, SubmissionState

# ---------- UI ----------
PAGE = """
<!doctype html>
<meta charset="utf-8" />
<title>PhyAssist</title>

<style>
  *{box-sizing:border-box}
  body{margin:0;background:#f4f7f9;font-family:-apple-system,BlinkMacSystemFont,"Segoe UI",Roboto,Helvetica,Arial,sans-serif;min-height:100vh;display:flex;flex-direction:column;align-items:center}
  header{width:100%;background:#2c3e50;color:#fff;padding:20px;text-align:center}
  main{width:100%;max-width:800px;padding:20px}
  .card{background:#fff;border-radius:8px;box-shadow:0 4px 6px rgba(0,0,0,.1);padding:25px;margin-bottom:20px}
  .card.error{background:#ffebee}
  .card.error h3{color:#c62828}
  .group{margin-bottom:20px}
  label{display:block;font-weight:bold;margin-bottom:8px;color:#333}
  input[type=text]{width:100%;padding:10px;border-radius:4px;border:1px solid #ccc}
  input[type=file]{width:100%}
  button{width:100%;padding:12px;font-size:16px;font-weight:bold;color:#fff;background:#3498db;border:none;border-radius:4px;cursor:pointer;transition:background-color .2s}
  button:disabled{color:#ccc;background:#a4b0be;cursor:not-allowed}
  .feedback{line-height:1.7;color:#333}
  .feedback math[display=block]{margin:.6em 0}
</style>

<header>
  <h1>PhyAssist</h1>
  <p>Your AI Assistant for H2 Physics</p>
</header>

<main>
  <div class="card">
    <form id="form" method="POST" enctype="multipart/form-data">
      <div class="group">
        <label for="question">1. Enter the Question</label>
        <input type="text" id="question" name="question" value="{{ question }}"
               placeholder="e.g., 'Calculate the centripetal force...'" />
      </div>
      <div class="group">
        <label for="solution">2. Upload Your Handwritten Solution</label>
        <input type="file" id="solution" name="solution" accept="image/png, image/jpeg" />
      </div>
      <button type="submit" id="submitBtn">Get Feedback</button>
    </form>
  </div>

  {% if error %}
  <div class="card error result">
    <h3>Error</h3>
    <p>{{ error }}</p>
  </div>
  {% endif %}

  {% if feedback_html %}
  <div class="card result">
    <h3>AI Feedback</h3>
    <div class="feedback">{{ feedback_html }}</div>
  </div>
  {% endif %}
</main>

<script>
const form = document.getElementById('form');
const submitBtn = document.getElementById('submitBtn');
// a new file makes the previous result stale
document.getElementById('solution').onchange = () => {
  document.querySelectorAll('.result').forEach(el => el.remove());
};
form.onsubmit = () => {
  if (submitBtn.disabled) return false;
  submitBtn.disabled = true; submitBtn.textContent = 'Analyzing...';
  return true;
};
// back/forward cache restores the disabled button otherwise
window.addEventListener('pageshow', () => { submitBtn.disabled = false; submitBtn.textContent = 'Get Feedback'; });
</script>
"""


def create_app(config: ClientConfig, client=None) -> Flask:
    """Frontend app: the form page, one Submission per POST.

    Each POST gets its own FeedbackClient on ``config.api_url`` unless ``client``
    is given. With no API URL configured there is no client and every
    submission fails with a configuration error instead of a request.
    """
    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = int(config.max_upload_mb * 1024 * 1024)

    def feedback_client():
        if client is not None:
            return client
        if not config.api_url:
            return None
        return FeedbackClient(config.api_url, timeout=config.timeout)

    @app.errorhandler(RequestEntityTooLarge)
    def too_large(_e):
        error = f"That picture is too large. Please upload an image under {config.max_upload_mb:g} MB."
        return render_template_string(PAGE, error=error), 413

    @app.get("/health")
    def health():
        return "ok", 200

    @app.get("/")
    def home():
        return render_template_string(PAGE)

    @app.post("/")
    def submit():
        question = request.form.get("question", "")
        sub = Submission(feedback_client())
        f = request.files.get("solution")
        if f and f.filename:
            sub.choose_file(f.read(), f.filename)

        state = sub.submit(question)
        if state is SubmissionState.SUCCESS:
            return render_template_string(PAGE, question=question, feedback_html=render_feedback(sub.feedback))
        app.logger.info("Submission failed: %s", sub.error)
        return render_template_string(PAGE, question=question, error=sub.error)

    return app
