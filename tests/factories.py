import asyncio
import copy

EVENT_PAYLOAD = {
    "title": "Fun with Fractions",
    "hostName": "Wang Fang",
    "hostEmail": "wang.fang@example.com",
    "hostWechatId": "wangfang_wx",
    "description": "Hands-on fractions with pizza slices",
    "location": {
        "address": "12 Oak Street",
        "city": "Seattle",
        "state": "WA",
        "zipCode": "98101",
    },
    "dateTime": "2026-11-07T10:00:00Z",
    "duration": 60,
    "maxCapacity": 8,
    "suggestedAgeRange": {"min": 4, "max": 10},
    "subject": "Mathematics",
    "skillLevel": "beginner",
    "materialsProvided": True,
    "requiredMaterials": ["pencil", "paper"],
    "additionalNotes": "Snacks provided",
}

REGISTRATION = {
    "parentName": "Li Na",
    "parentEmail": "li.na@example.com",
    "parentWechatId": "lina_wx",
    "childName": "Mia",
    "childAge": 6,
    "notes": "First class",
}


def run(coro):
    """Drive a service coroutine from a synchronous test."""
    return asyncio.run(coro)


def make_event(**overrides):
    payload = copy.deepcopy(EVENT_PAYLOAD)
    payload.update(overrides)
    return payload


def make_registration(**overrides):
    payload = dict(REGISTRATION)
    payload.update(overrides)
    return payload
