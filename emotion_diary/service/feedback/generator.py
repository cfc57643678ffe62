"""감정 피드백 생성 서비스 (순수 생성 로직만)

DB 접근 로직 없음 - 일기 본문을 받아서 LLM 호출(또는 고정 문구 선택)만 수행
"""
import random
import logging

from langchain_core.messages import SystemMessage, HumanMessage
from langsmith import traceable

from ...prompt.emotion_feedback_prompt import (
    EMOTION_FEEDBACK_SYSTEM_PROMPT,
    EMOTION_FEEDBACK_USER_PROMPT,
    EMOTION_REANALYZE_INSTRUCTION,
)
from ...utils.schemas import EmotionFeedbackInput, EmotionFeedbackOutput

logger = logging.getLogger(__name__)


# LLM 미사용(canned) 모드 문구
CANNED_FEEDBACKS = [
    "오늘 하루를 솔직하게 적어주셔서 고마워요. 당신의 마음을 이해하고 있어요.",
    "글 속에서 여러 감정이 느껴져요. 그 감정들 모두 소중한 당신의 일부예요.",
    "힘든 순간에도 스스로를 돌아보는 모습이 정말 멋져요.",
    "작은 기쁨을 발견하는 마음이 느껴져요. 그 마음을 오래 간직하세요.",
    "오늘도 충분히 잘 해냈어요. 편안한 밤 보내세요.",
]

CANNED_REANALYZE_FEEDBACKS = [
    "다시 읽어보니 더 깊은 감정이 느껴져요. 당신의 마음을 이해하고 있어요.",
    "시간이 지나면서 새로운 관점으로 바라볼 수 있게 되었네요.",
    "이런 순간들이 당신을 더 성숙하게 만들어가고 있어요.",
    "감정의 흐름을 잘 표현하고 계시네요. 정말 대단해요.",
    "작은 변화들이 모여 큰 성장을 만들어가고 있어요.",
]


def pick_canned_feedback(input_data: EmotionFeedbackInput) -> EmotionFeedbackOutput:
    """고정 문구 중 하나를 무작위로 선택"""
    pool = CANNED_REANALYZE_FEEDBACKS if input_data.is_reanalyze else CANNED_FEEDBACKS
    return EmotionFeedbackOutput(feedback_text=random.choice(pool))


@traceable(name="generate_emotion_feedback")
async def generate_emotion_feedback(
    input_data: EmotionFeedbackInput,
    llm
) -> EmotionFeedbackOutput:
    """감정 피드백 생성 (순수 LLM 호출)

    Args:
        input_data: 일기 본문, 날짜, 재분석 여부
        llm: LLM 인스턴스

    Returns:
        EmotionFeedbackOutput: LLM이 생성한 피드백
    """
    try:
        user_prompt = EMOTION_FEEDBACK_USER_PROMPT.format(
            target_date=input_data.target_date.isoformat() if input_data.target_date else "오늘",
            content=input_data.content
        )

        # 재분석이면 관점 전환 지침을 맨 앞에 배치
        if input_data.is_reanalyze:
            system_prompt = EMOTION_REANALYZE_INSTRUCTION + "\n\n" + EMOTION_FEEDBACK_SYSTEM_PROMPT
            logger.info("[EmotionFeedback] 🔁 재분석 모드")
        else:
            system_prompt = EMOTION_FEEDBACK_SYSTEM_PROMPT

        response = await llm.ainvoke([
            SystemMessage(content=system_prompt),
            HumanMessage(content=user_prompt)
        ])

        feedback_text = (response.content or "").strip()
        if not feedback_text:
            raise ValueError("LLM이 빈 피드백을 반환했습니다.")

        logger.info(f"[EmotionFeedback] 피드백 생성 완료 ({len(feedback_text)}자)")
        return EmotionFeedbackOutput(feedback_text=feedback_text)

    except Exception as e:
        logger.error(f"[EmotionFeedback] 피드백 생성 실패: {e}")
        raise


async def create_feedback(input_data: EmotionFeedbackInput, mode: str) -> EmotionFeedbackOutput:
    """설정된 방식으로 피드백 생성

    Args:
        mode: "llm" (Vertex AI) | "canned" (고정 문구)
    """
    if mode == "canned":
        return pick_canned_feedback(input_data)

    from ...utils.models import get_feedback_llm
    return await generate_emotion_feedback(input_data, get_feedback_llm())
