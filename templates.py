import html
from typing import List, Optional, Union

from logic import format_names

LOGO_URL = "https://i.ibb.co/yVwQF0z/shepherdlogo.png"
SUPPORT_EMAIL = "gift@shepherd.study"
LOGIN_URL = "https://www.shepherd.study"
LINK_STYLE = "color: #007BFF; text-decoration: none;"


def _referral_block(referral_link: str, formatted_names: str) -> str:
    return f"""
  <p style="font-size: 16px; margin-bottom: 20px;">
    <strong>Referral Bonus:</strong> If you know other parents who might benefit from Shepherd, share this referral link: <a href="{html.escape(referral_link, quote=True)}" style="{LINK_STYLE}">{html.escape(referral_link)}</a>. If 10 parents subscribe through your link, <strong>{formatted_names}</strong> will get 2 extra months FREE!
  </p>
"""


def purchaser_template(
    purchaser_name: str,
    recipient_names: Union[List[str], str],
    referral_link: Optional[str] = None,
) -> str:
    if isinstance(recipient_names, (list, tuple)):
        names = [html.escape(n or "") for n in recipient_names]
        plural = "children" if len(names) > 1 else "child"
    else:
        names = html.escape(recipient_names or "")
        plural = "child"
    formatted = format_names(names)
    referral = _referral_block(referral_link, formatted) if referral_link else ""

    return f"""<div style="text-align: center; font-family: Arial, sans-serif; color: #333;">

  <div style="margin-bottom: 20px;">
    <img src="{LOGO_URL}" alt="Gift Image" style="max-width: 100%; height: auto; margin-bottom: 20px;" />
  </div>

  <h1 style="font-size: 28px; color: #333; margin-bottom: 20px;">Your Gift Has Been Activated! 🎁</h1>

  <p style="font-size: 18px; margin-bottom: 10px;">Hi <strong>{html.escape(purchaser_name or "")}</strong>,</p>
  <p style="font-size: 16px; margin-bottom: 20px;">
    Thank you for sponsoring your <strong>{plural}</strong>, <strong>{formatted}</strong>'s academic success with Shepherd! 🎉 You’ve just given them the ultimate study sidekick to help them excel in school. Here’s a quick reminder of what {formatted} get(s) with their Shepherd subscription:
  </p>

  <ul style="padding: 0; font-size: 16px; line-height: 1.8; text-align: left; display: inline-block; margin-bottom: 30px;">
    <li> AI-powered note-taking to capture and summarize every class.</li>
    <li> 24/7 AI Tutor for homework help whenever they need it.</li>
    <li> Personalized study plans to keep them on track with their goals.</li>
    <li> Quizzes and flashcards created from their notes to help them study smarter, not harder.</li>
    <li> Intelligent Task List to keep them on track.</li>
  </ul>

  <p style="font-size: 16px; margin-bottom: 20px;">
    We’re thrilled to have <strong>{formatted}</strong> on board and know they’ll love using Shepherd to boost their learning!
  </p>
{referral}
  <p style="font-size: 16px; margin-bottom: 30px;">
    Thanks again for your support! If you have any questions, feel free to reach out to us at <a href="mailto:{SUPPORT_EMAIL}" style="{LINK_STYLE}">{SUPPORT_EMAIL}</a>.
  </p>

  <p style="font-size: 16px; line-height: 1.6;">
    Best regards,<br />
    <strong>The Shepherd Team</strong>
  </p>

</div>
"""


def recipient_template(
    recipient_name: str,
    purchaser_name: str,
    coupon_code: str,
    message: Optional[str] = None,
) -> str:
    message_block = ""
    if message:
        message_block = (
            '<p style="font-size: 16px; font-style: italic; margin-bottom: 20px;">'
            f"Here’s a special message from them: &quot;{html.escape(message)}&quot;</p>"
        )

    return f"""<div style="text-align: center; font-family: Arial, sans-serif; color: #333;">

  <div style="margin-bottom: 20px;">
    <img src="{LOGO_URL}" alt="Gift Image" style="max-width: 100%; height: auto;" />
  </div>

  <h1 style="font-size: 28px; color: #333; margin-bottom: 20px;">You’ve Got a Gift! 🎁</h1>

  <p style="font-size: 18px; margin-bottom: 10px;">Hi <strong>{html.escape(recipient_name or "")}</strong>,</p>
  <p style="font-size: 16px; margin-bottom: 20px;">
    Guess what? <strong>{html.escape(purchaser_name or "")}</strong> has just gifted you a full year of Shepherd—your very own AI-powered study assistant! 🎉
  </p>

  {message_block}

  <p style="font-size: 16px; margin-bottom: 10px;">With Shepherd, you’ll be able to:</p>
  <ul style="padding: 0; font-size: 16px; line-height: 1.8; text-align: left; display: inline-block; margin-bottom: 30px;">
    <li> Take and summarize notes easily, so you never miss key points.</li>
    <li> Get 24/7 homework help from your personal AI Tutor.</li>
    <li> Create personalized study plans to stay organized and ace your exams.</li>
    <li> Turn your notes into quizzes and flashcards to make studying a breeze.</li>
  </ul>

  <p style="font-size: 16px; margin-bottom: 20px;">
    Your coupon code is: <strong>{html.escape(coupon_code)}</strong>
  </p>

  <p style="font-size: 16px; margin-bottom: 30px;">
    To get started, just log in here: <a href="{LOGIN_URL}" style="{LINK_STYLE}">www.shepherd.study</a>.
  </p>

  <p style="font-size: 16px; line-height: 1.6;">
    Best of luck with your studies,<br />
    <strong>The Shepherd Team</strong>
  </p>

</div>
"""
