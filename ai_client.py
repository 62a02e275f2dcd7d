import logging
from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from activities import (
  LAST_RESORT_ACTIVITY,
  SOURCE_FALLBACKS,
  ActivityResult,
  RandomIndex,
  pick_random,
)
from config import Settings
from response_parser import Unrecoverable, normalize_response

logger = logging.getLogger("activity-source")

RETRYABLE_STATUS = {408, 425, 429, 500, 502, 503, 504}
API_ERROR = "API error"

ACTIVITY_PROMPT = """Generate a spontaneous, fun, and slightly challenging activity that someone could do to break out of their routine and embrace the principles of improvisation.

The activity should:
- Be specific with clear instructions
- Be doable within an hour
- Be slightly outside most people's comfort zones but not dangerous
- Encourage creativity, spontaneity, or social interaction
- Not require special equipment or significant money
- Be appropriate for adults of any age
- Be inspired by Patricia Madson's Improv Wisdom and Keith Johnstone's Impro.
- Each generated response should be uniquely distinct from the previous ones.

Patricia Madson's Improv Wisdom Maxims =
[say yes, don't prepare, just show up, start anywhere, be average, pay attention, face the facts, stay on course, wake up to gifts, make mistakes, act now, take care of each other, enjoy the ride]

Some exercises to base these activities off of =
- Support someone else's dreams. Pick a person (your spouse, child, boss), and, for a week, agree with all of their ideas. Find something right about everything they say or do. Look for every opportunity to offer support. Consider their convenience and time preferences ahead of your own. Give them the spotlight. Notice the results.
- For one day say yes to everything. Set your own preferences aside. Notice the results. See how often it may not be convenient or easy to do this. Obviously, use common sense in executing this rule.
- Spend a day without a plan. Have an adventure. Instead of following ordinary routines, open your eyes especially wide and move along with curiosity and attention. Don't consult your to-do list; instead decide what to do based on what needs to be done right now, using your heightened awareness.
- Substitute Zen-like attention for planning. When you notice that your mind is planning what you will do or say, make a conscious shift of attention to the present moment. Notice everything that is going on now. Listen with both ears. Substitute attention to what is happening for attention to what might happen.
- Create a simple ritual. Identify a habit that you wish you had (exercising, reading regularly, meditating, paying bills). Think of what will make the habit easy or more attractive to do. Set a time to do the preparatory ritual each day. Focus on doing it faithfully.
- Change the location of a familiar activity. Surprise your cohorts by moving the weekly meeting outdoors, to the booth of a coffee bar, to the lounge at a local museum. Try moving a chair into the garden to read a book. Take your lunch to a new location away from your workplace. Explore a new vantage point.
- Attend to one thing at a time. Choose an ordinary activity (sorting laundry, eating lunch, brushing your hair) and pay attention only to what you are doing while you are doing it. Avoid multitasking. Reflect on the taste of the food, on who prepared it, and how it came to you. If you notice that your mind has wandered, bring it back to what you are doing.
- Go for a fifteen-minute walk in your neighborhood. Imagine you have just landed there from another planet. Use all five of the senses: sight, sound, touch, taste, and smell. What surprises you about your environment? What is especially beautiful or noteworthy? What needs doing around here?
- "What is my purpose now?" Use this question as a weathervane. Ask it often, especially when you are anxious or unsure of what to do next. When you have the answer, act upon it.

IMPORTANT: Your response MUST be a valid JSON object with exactly these two fields:
- "title": A catchy, concise title for the activity (5 words or less)
- "description": A 2-3 sentence description with specific instructions

DO NOT include any markdown formatting, code blocks, or explanations outside the JSON.
DO NOT use backticks (`) or any other formatting.
ONLY return the raw JSON object.

Example of the EXACT format to use:
{"title":"Dance in Public","description":"Find a busy public area and dance to your favorite song for 30 seconds. Make eye contact with at least one stranger and smile while dancing."}"""


class TransportError(Exception):
  """The generation API could not be reached or did not return usable text."""


def build_session(retries: int = 0) -> requests.Session:
  s = requests.Session()
  if retries > 0:
    retry = Retry(
      total=retries,
      connect=retries,
      read=retries,
      status=retries,
      backoff_factor=1,  # 1s, 2s, 4s
      status_forcelist=RETRYABLE_STATUS,
      allowed_methods=frozenset({'POST'}),
      raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    s.mount('https://', adapter)
    s.mount('http://', adapter)
  return s


class ActivitySource:
  """Produces one activity per call, from the chat-completions API when a key is configured.

  `obtain_activity` never raises. Every failure ends in a static fallback, so the caller
  always gets something displayable; transport failures are tagged with ``error="API error"``.
  """

  def __init__(self, settings: Settings, session: Optional[requests.Session] = None, random_index: Optional[RandomIndex] = None):
    self.settings = settings
    self.random_index = random_index
    self._session = session
    if not settings.has_credential:
      logger.warning("OPENAI_API_KEY not set. Activities will come from the static fallback list.")

  @property
  def session(self) -> requests.Session:
    if self._session is None:
      self._session = build_session(self.settings.transport_retries)
    return self._session

  def _fallback(self, error: Optional[str] = None) -> ActivityResult:
    activity = pick_random(SOURCE_FALLBACKS, self.random_index)
    logger.info("Using fallback activity %r", activity.title)
    return ActivityResult(success=True, activity=activity, error=error)

  def request_completion(self) -> str:
    """POST the fixed prompt and return the completion text, or raise TransportError."""
    payload = {
      "model": self.settings.model,
      "messages": [{"role": "user", "content": ACTIVITY_PROMPT}],
      "temperature": self.settings.temperature,
    }
    headers = {"Authorization": f"Bearer {self.settings.openai_api_key}", "Content-Type": "application/json"}
    url = self.settings.openai_base_url + "/chat/completions"
    try:
      resp = self.session.post(url, headers=headers, json=payload, timeout=self.settings.request_timeout)
      try:
        resp.raise_for_status()
      except requests.HTTPError:
        logger.error("LLM request failed: status=%s body=%.500s", getattr(resp, 'status_code', None), resp.text)
        raise
      data = resp.json()
    except (requests.RequestException, ValueError) as e:
      raise TransportError(str(e)) from e

    try:
      text = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
      raise TransportError("completion response has no message content") from e
    if not isinstance(text, str):
      raise TransportError("completion message content is not text")
    return text

  def obtain_activity(self) -> ActivityResult:
    try:
      if not self.settings.has_credential:
        logger.info("No OpenAI API key found, using fallback activities")
        return self._fallback()

      logger.info("API key available, generating activity with model %s", self.settings.model)
      try:
        text = self.request_completion()
      except TransportError:
        logger.exception("Error calling the generation API; falling back to predefined activities")
        return self._fallback(error=API_ERROR)

      outcome = normalize_response(text)
      if isinstance(outcome, Unrecoverable):
        logger.warning("Could not recover an activity from the model output")
        return self._fallback()
      return ActivityResult(success=True, activity=outcome.activity)
    except Exception:
      logger.exception("Error generating activity")
      return ActivityResult(success=True, activity=LAST_RESORT_ACTIVITY)
