"""감정일기 - AI 감정 피드백 일기 서비스"""
