# thinkarena/seed_data.py
from sqlalchemy.orm import Session

from . import models

# AOT items; reversed ones are scored 7 - v
AOT_QUESTIONS = [
    ("Changing your mind is a sign of weakness.", True),
    ("A person should always consider new possibilities.", False),
    ("If I think longer about a problem I will be more likely to solve it.", False),
    ("Basically, I know everything I need to know about the important things in life.", True),
    ("Considering too many different opinions often leads to bad decisions.", True),
    ("Solutions to problems usually happen by thinking about them, rather than by waiting for good luck.", False),
    ("It's OK to be undecided about some things.", False),
    ("It's bad to change how you think about something.", True),
    ("Coming to decisions quickly is a sign of wisdom.", True),
    ("It doesn't really matter if I get some facts wrong because the facts are always changing anyway.", True),
    ("I like to gather many different types of information or evidence before I decide what to do.", False),
    ("I don't feel I have to have reasons for what I do.", True),
]

TOPIC_QUESTIONS = [
    "The Government should ban abortion",
    "You need to support LGBTQ+ people to be a good person",
    "Owning a gun is a fundamental right",
    "The feminist movement has gone too far",
    "Being overweight is a problem that should be addressed",
    "Cosmetic surgery should be treated as normal as makeup",
    "Police violence is exaggerated by the media",
    "Men and women have natural differences that make men better at certain things",
    "Prison sentences are too light",
    "TikTok is harmful and the world would be better without it",
    "Trans women have a competitive advantage that is unfair",
    "Eating animals is morally acceptable",
    "Sons and daughters should be raised differently",
    "Smacking children can be an acceptable form of discipline",
    "Polygamy (having more than one wife or husband at the same time) should be legalised",
    "The death penalty is a fair punishment for certain crimes",
    "The government should be allowed to force people to get vaccinated for serious diseases",
    "There are too many 'Welcome to country' ceremonies these days",
]

BADGES = [
    ("reason_giver", "Gives a reason for their main point", "/badges/reason-giver-badge.webp"),
    ("fact_checker", "Questions if something is actually true", "/badges/fact-checker-badge.webp"),
    ("link_cutter", "Shows a true premise does not make the conclusion true", "/badges/link-cutter-badge.webp"),
    ("hidden_premise_hunter", "Points out an unstated assumption", "/badges/hidden-premise-badge.webp"),
    ("evidence_expert", "Backs up a point with proof or an example", "/badges/evidence-expert-badge.webp"),
]


def seed_reference_data(db: Session) -> None:
    """Idempotent: each table is filled only when empty."""
    if not db.query(models.ScaleQuestion).first():
        db.add_all([models.ScaleQuestion(text=t, is_reversed=r) for t, r in AOT_QUESTIONS])
    if not db.query(models.TopicQuestion).first():
        db.add_all([models.TopicQuestion(text=t) for t in TOPIC_QUESTIONS])
    if not db.query(models.Badge).first():
        db.add_all([models.Badge(name=n, description=d, image_ref=i) for n, d, i in BADGES])
    db.commit()
