from typing import Dict, Any, Optional


def success_response(message: Optional[str] = None, **data: Any) -> Dict[str, Any]:
    """성공 응답"""
    response: Dict[str, Any] = {"success": True}
    if message:
        response["message"] = message
    response.update(data)
    return response


def error_response(error_message: str, redirect_to: Optional[str] = None) -> Dict[str, Any]:
    """에러 응답 (사용자에게 그대로 보여줄 메시지)"""
    response: Dict[str, Any] = {
        "success": False,
        "error": error_message,
    }
    if redirect_to:
        response["redirect_to"] = redirect_to
    return response
