"""
Metadata Generator - Titles, descriptions and tags for mystery / true crime uploads
"""
import random
import re
import logging
from datetime import datetime, timedelta
from typing import Optional, Sequence
from zoneinfo import ZoneInfo

from ..models.schemas import GeneratedMetadata, Language

logger = logging.getLogger(__name__)


TITLE_TEMPLATES = {
    Language.HINDI: [
        "रहस्यमयी {topic} - सच्ची घटना | Dark Mystery",
        "{topic} का अनसुलझा रहस्य | True Crime India",
        "खौफनाक {topic} की कहानी | Real Crime Story",
        "भारत का सबसे डरावना केस: {topic}",
        "{topic} - जिसे सुनकर रूह कांप जाए | Mystery",
        "असली अपराध: {topic} का काला सच",
    ],
    Language.ENGLISH: [
        "The Dark Mystery of {topic} | True Crime",
        "Unsolved: The {topic} Case | Crime Documentary",
        "{topic} - A Chilling True Story",
        "India's Most Mysterious Case: {topic}",
        "The Haunting Truth Behind {topic}",
        "Dark Secrets: The {topic} Investigation",
    ],
    Language.HINGLISH: [
        "{topic} Ka Rahasya | Dark Mystery Revealed",
        "Bharat Ki Sabse Bhayankar Crime: {topic}",
        "{topic} - Ek Sachi Kahani | True Crime",
        "Mystery Solved: {topic} Ka Sach",
        "{topic} Case - Jo Aapko Sochne Par Majboor Karegi",
        "Real Crime Story: {topic} Ka Anth",
    ],
}

DESCRIPTION_TEMPLATES = {
    Language.HINDI: """{summary}

इस वीडियो में हम {topic} के रहस्यमय मामले को विस्तार से जानेंगे। यह एक सच्ची घटना है जो आपको सोचने पर मजबूर कर देगी।

⚠️ अस्वीकरण: यह वीडियो केवल शैक्षिक और जागरूकता उद्देश्यों के लिए है। हम किसी भी प्रकार की हिंसा या अपराध को बढ़ावा नहीं देते हैं।

🔔 चैनल को सब्सक्राइब करें और नोटिफिकेशन बेल को ऑन करें ताकि आप ऐसे और भी रहस्यमय मामलों के बारे में जान सकें।

#TrueCrime #Mystery #CrimeStory #DarkSecrets #IndianCrime #Documentary""",
    Language.ENGLISH: """{summary}

In this video, we delve deep into the mysterious case of {topic}. This is a true crime story that will leave you questioning everything.

⚠️ Disclaimer: This video is for educational and awareness purposes only. We do not promote violence or criminal activities in any form.

🔔 Subscribe to our channel and turn on notifications to stay updated with more dark mysteries and crime documentaries.

#TrueCrime #Mystery #CrimeDocumentary #DarkSecrets #Investigation #RealStory""",
    Language.HINGLISH: """{summary}

Is video mein hum {topic} ke mysterious case ko detail mein jaanenge. Yeh ek true crime story hai jo aapko shock kar degi.

⚠️ Disclaimer: Yeh video sirf educational aur awareness purpose ke liye hai. Hum kisi bhi tarah ki violence ya crime ko promote nahi karte.

🔔 Channel ko subscribe karein aur notification bell on karein taaki aap aur bhi dark mysteries aur crime stories dekh sakein.

#TrueCrime #Mystery #CrimeStory #DarkSecrets #Investigation #IndianCrime""",
}

COMMON_TAGS = [
    "true crime",
    "mystery",
    "crime documentary",
    "dark secrets",
    "unsolved mystery",
    "investigation",
    "crime story",
    "real crime",
    "mystery solved",
    "crime investigation",
]

LANGUAGE_TAGS = {
    Language.HINDI: "crime hindi",
    Language.ENGLISH: "crime english",
    Language.HINGLISH: "crime hinglish",
}

RESTRICTED_WORDS = [
    "murder",
    "killed",
    "blood",
    "death",
    "violence",
    "assault",
    "brutal",
    "torture",
    "suicide",
    "graphic",
]

_RESTRICTED_PATTERNS = [
    re.compile(rf"\b{re.escape(word)}\b", re.IGNORECASE) for word in RESTRICTED_WORDS
]


def _mask(match: re.Match) -> str:
    word = match.group(0)
    return word[0] + "*" * (len(word) - 1)


def sanitize_text(text: str) -> str:
    """Mask restricted words, keeping the first letter: "Murder" -> "M*****" """
    for pattern in _RESTRICTED_PATTERNS:
        text = pattern.sub(_mask, text)
    return text


def build_tags(topic: str, language: Language, custom_tags: Sequence[str] = ()) -> list[str]:
    """Ordered, de-duplicated tag list without empty entries"""
    candidates = [
        *COMMON_TAGS,
        *custom_tags,
        topic.lower(),
        f"{topic} case",
        LANGUAGE_TAGS[language],
    ]
    return [tag for tag in dict.fromkeys(candidates) if tag]


def generate_metadata(
    topic: str,
    summary: str,
    language: Language = Language.HINDI,
    custom_tags: Optional[Sequence[str]] = None,
    rng=None
) -> GeneratedMetadata:
    """
    Generate YouTube metadata for a video

    Args:
        topic: Case name inserted into the title and description
        summary: Opening paragraph of the description
        language: hi, en or hinglish
        custom_tags: Extra tags placed after the common ones
        rng: Object with a choice() method; the random module by default

    Returns:
        GeneratedMetadata with restricted words masked
    """
    language = Language(language)
    rng = rng or random

    title_template = rng.choice(TITLE_TEMPLATES[language])
    title = sanitize_text(title_template.replace("{topic}", topic, 1))

    description = sanitize_text(
        DESCRIPTION_TEMPLATES[language]
        .replace("{topic}", topic)
        .replace("{summary}", summary, 1)
    )

    tags = build_tags(topic, language, custom_tags or ())

    logger.info(f"Metadata generated: title={title!r}, language={language.value}, tags={len(tags)}")

    return GeneratedMetadata(
        title=title,
        description=description,
        tags=tags,
        language=language
    )


def generate_schedule_time(
    uploads_per_week: int = 3,
    now: Optional[datetime] = None,
    timezone: str = "Asia/Kolkata",
    hour: int = 18
) -> datetime:
    """
    Suggest the next publish time for a channel posting N videos a week

    The slot is floor(7 / uploads_per_week) days from now, at `hour`:00
    in `timezone`.
    """
    if not 1 <= uploads_per_week <= 7:
        raise ValueError("uploads_per_week must be between 1 and 7")

    tz = ZoneInfo(timezone)
    now = now.astimezone(tz) if now else datetime.now(tz)
    next_upload = now + timedelta(days=7 // uploads_per_week)
    next_upload = next_upload.replace(hour=hour, minute=0, second=0, microsecond=0)

    logger.info(f"Schedule time generated: {next_upload.isoformat()} ({uploads_per_week}/week)")
    return next_upload
