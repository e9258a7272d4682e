from __future__ import annotations


APP_NAME: str = "assistant_gate"

# User-facing, short, user-safe messages (no stack traces)
MSG_WELCOME: str = "Hola! Escribeme tu pregunta y el asistente te respondera en breve."
MSG_HELP: str = (
    "Envia tus mensajes como texto normal.\n"
    "Los respondo en el mismo orden en que llegan, uno por uno."
)
MSG_BANNED: str = "Haz abusado del servicio, estas baneado por {hours} horas."
MSG_NEAR_LIMIT: str = "Aviso: te quedan {left} mensajes antes de alcanzar el limite."
MSG_COMPLETION_FAILED: str = "Lo siento, hubo un problema al procesar tu mensaje. Intenta de nuevo mas tarde."
MSG_INTERNAL_ERROR: str = "Algo salio mal. Intenta de nuevo en un momento."
MSG_TEXT_ONLY: str = "Por ahora solo entiendo mensajes de texto."
