"""Categorization requests for the language model."""

from pydantic import BaseModel, Field

from ..models.chat import ChatMessage
from ..models.tracking import Category


class ClassifierRequest(BaseModel):
    """A role-tagged prompt plus sampling parameters."""

    messages: list[ChatMessage]
    temperature: float = 0.7
    max_tokens: int = Field(default=200, gt=0)

    @property
    def system(self) -> str:
        """All system messages joined, for providers that take them separately."""
        return "\n\n".join(m.content for m in self.messages if m.role == "system")

    @property
    def conversation(self) -> list[dict]:
        return [m.to_prompt() for m in self.messages if m.role != "system"]


class ClassificationRequestBuilder:
    """
    Builds the categorization prompt for a user message.

    Only the first ``MAX_MESSAGE_CHARS`` characters of the message reach the
    model.
    """

    MAX_MESSAGE_CHARS = 500

    SYSTEM_PROMPT = (
        "You are a categorization assistant. Messages can have MULTIPLE categories. "
        "Return valid JSON only. Make summaries unique and descriptive. "
        "For triggers, extract symptom to extractedSymptom field."
    )

    CATEGORIZATION_PROMPT = """Analyze this message and categorize it. Return ONLY valid JSON, no markdown.

CRITICAL RULES:
1. A message can belong to MULTIPLE categories - return ALL that apply
2. Summaries must be UNIQUE and DESCRIPTIVE (max 15 words)
3. NO duplicates - make each summary distinct

Required JSON format:
{"categories":["category1","category2"],"foodCategory":null,"keywords":["word1"],"summaries":{"category1":"unique summary 1","category2":"unique summary 2"},"extractedSymptom":null}

CATEGORY LOGIC - A MESSAGE CAN BE MULTIPLE:

1. dietary: User CONSUMED food/drink
   - "I ate pizza" = dietary
   - "I drank milk" = dietary
   - Track in foodCategory: carbs/proteins/dairy/fibre

2. trigger: Food/activity CAUSES a symptom (cause-effect relationship)
   - "Pizza makes me bloated" = trigger + dietary
   - "I ate spicy food and got diarrhea" = trigger + dietary
   - Summary: "[Food] may trigger [symptom] - watch out"
   - MUST extract symptom to extractedSymptom field

3. symptom: ONLY if describing feeling WITHOUT mentioning cause
   - "I feel bloated" = symptom only
   - "My stomach hurts" = symptom only
   - NOT for: "Pizza made me bloated" (that's trigger+dietary)

4. general: Greetings, questions, opinions without health info

EXAMPLES:
Message: "I ate pizza and got bloated"
-> {"categories":["dietary","trigger"],"foodCategory":"carbs","keywords":["pizza","bloating"],"summaries":{"dietary":"Ate pizza","trigger":"Pizza may trigger bloating - watch out"},"extractedSymptom":"bloating"}

Message: "Spicy food gives me diarrhea"
-> {"categories":["trigger"],"foodCategory":null,"keywords":["spicy","diarrhea"],"summaries":{"trigger":"Spicy food may trigger diarrhea - watch out"},"extractedSymptom":"diarrhea"}

Message: "I feel bloated"
-> {"categories":["symptom"],"foodCategory":null,"keywords":["bloated"],"summaries":{"symptom":"Experiencing bloating"},"extractedSymptom":null}

Message: "I ate bread"
-> {"categories":["dietary"],"foodCategory":"carbs","keywords":["bread"],"summaries":{"dietary":"Ate bread"},"extractedSymptom":null}

Message: """

    VALIDATION_TEMPLATE = (
        'VALIDATE: Does it make sense to categorize "{message}" as "{category}"? '
        "If yes, categorize it as {category}. If no, use the original best category."
    )

    def build_request(self, message: str) -> ClassifierRequest:
        """Build the categorization request for a message. Never fails."""
        text = (message or "")[: self.MAX_MESSAGE_CHARS]
        return ClassifierRequest(
            messages=[
                ChatMessage(role="system", content=self.SYSTEM_PROMPT),
                ChatMessage(role="user", content=self.CATEGORIZATION_PROMPT + text),
            ],
            temperature=0.15,
            max_tokens=200,
        )

    def build_validation_request(self, message: str, category: Category) -> ClassifierRequest:
        """Ask the model whether a user-chosen category fits the message."""
        prompt = self.VALIDATION_TEMPLATE.format(message=message, category=category.value)
        return self.build_request(prompt)
