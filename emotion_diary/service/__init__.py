"""서비스 레이어 - 일기 생명주기, 감정 분석, 달력 투영

하위 모듈을 직접 import 해서 사용합니다.
(database 레이어가 calendar 투영을 사용하므로 여기서 re-export 하지 않음)
"""
