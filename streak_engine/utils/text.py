# streak_engine/utils/text.py
"""
동기부여 문구/명언 카탈로그와 선택기
테스트에서는 결정적인 선택기를 주입한다.
"""
from __future__ import annotations

import random
from typing import Optional, Protocol, Sequence

MOTIVATIONS = [
    "Stay focused, stay present",
    "Consistency is key to success",
    "Every small step counts",
    "You are building better habits",
    "Discipline equals freedom",
    "Progress, not perfection",
    "You have got this!",
    "Small daily improvements lead to big results",
]

QUOTES = [
    "Discipline is the bridge between goals and accomplishment.",
    "Success is the sum of small efforts repeated day in and day out.",
    "The pain of discipline weighs ounces, but the pain of regret weighs tons.",
    "Champions don't become champions in the ring. They become champions in their training.",
    "Every day, in every way, I'm getting better and better.",
    "Small daily improvements are the key to staggering long-term results.",
    "You'll never change your life until you change something you do daily.",
    "The only way to do great work is to love what you do.",
]


class TextPicker(Protocol):
    def pick(self, options: Sequence[str]) -> str: ...


class RandomPicker:
    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def pick(self, options: Sequence[str]) -> str:
        if not options:
            return ""
        return self.rng.choice(list(options))
