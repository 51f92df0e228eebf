"""NiceGUI chat interface with threads and streamed replies.

Every view is a projection of ``ChatSession`` state: the thread list, the
message list, the error banner and the loading indicator are re-rendered
from the store rather than patched individually.
"""

from functools import partial

from nicegui import app, ui

from src.chat.client import ChatClient
from src.chat.session import ChatSession
from src.models.threads import Message
from src.threads.store import ThreadStore

# Refresh interval while a reply is streaming
STREAM_REFRESH_SECONDS = 0.1

CUSTOM_CSS = """
<style>
    body { background: #f1f5f9; }
    .message-user {
        background: #0f172a;
        color: white;
        border-radius: 12px;
    }
    .message-assistant {
        background: #e2e8f0;
        color: #0f172a;
        border-radius: 12px;
    }
    .thread-active { background: #e2e8f0; }
    .typing-dot {
        width: 8px; height: 8px;
        background: #94a3b8;
        border-radius: 50%;
        animation: bounce 1.4s infinite ease-in-out;
    }
    .typing-dot:nth-child(2) { animation-delay: 0.15s; }
    .typing-dot:nth-child(3) { animation-delay: 0.3s; }
    @keyframes bounce {
        0%, 60%, 100% { transform: translateY(0); }
        30% { transform: translateY(-6px); }
    }
</style>
"""

_chat_client: ChatClient | None = None


def get_chat_client() -> ChatClient:
    """Get or create the chat client shared by all pages."""
    global _chat_client
    if _chat_client is None:
        _chat_client = ChatClient()
    return _chat_client


async def close_chat_client() -> None:
    global _chat_client
    if _chat_client is not None:
        await _chat_client.aclose()
        _chat_client = None


app.on_shutdown(close_chat_client)


def render_message(message: Message) -> None:
    is_user = message.role == "user"
    align = "justify-end" if is_user else "justify-start"
    with ui.row().classes(f"w-full {align}"):
        with ui.element("div").classes(
            f"max-w-[80%] px-4 py-3 {'message-user' if is_user else 'message-assistant'}"
        ):
            if is_user:
                ui.label(message.content).classes("whitespace-pre-wrap text-sm")
            else:
                ui.markdown(message.content).classes("text-sm")


def render_typing_indicator() -> None:
    with ui.row().classes("w-full justify-start"):
        with ui.element("div").classes("message-assistant px-4 py-3"):
            with ui.row().classes("gap-1"):
                for _ in range(3):
                    ui.element("div").classes("typing-dot")


@ui.page("/")
def chat_page() -> None:
    """Main chat page."""
    ui.add_head_html(CUSTOM_CSS)
    session = ChatSession(ThreadStore.load(app.storage.user), get_chat_client())

    input_field: ui.textarea
    send_btn: ui.button

    @ui.refreshable
    def thread_list() -> None:
        for index, thread in enumerate(session.store.threads):
            active = index == session.store.active_index
            with ui.row().classes(
                f"w-full items-center no-wrap rounded px-2 {'thread-active' if active else ''}"
            ):
                ui.label(thread.title).classes(
                    "flex-grow truncate cursor-pointer text-sm"
                ).on("click", partial(switch_thread, index))
                ui.button(
                    icon="delete", on_click=partial(delete_thread, index)
                ).props("flat round dense size=sm color=grey")

    @ui.refreshable
    def message_list() -> None:
        if session.error:
            with ui.row().classes(
                "w-full items-center bg-red-50 text-red-800 rounded-lg px-4 py-2"
            ):
                ui.label(session.error).classes("flex-grow text-sm")
                ui.button(icon="close", on_click=dismiss_error).props("flat round dense")

        messages = session.store.active.messages
        if not messages and not session.error:
            with ui.column().classes("w-full h-64 items-center justify-center"):
                ui.label("Send a message to start chatting").classes("text-slate-500")

        for message in messages:
            render_message(message)

        if session.is_loading:
            render_typing_indicator()

    def refresh_all() -> None:
        thread_list.refresh()
        message_list.refresh()
        send_btn.set_enabled(session.can_send and session.client_secret is not None)

    def refresh_while_streaming() -> None:
        if session.is_loading:
            refresh_all()

    async def init_session() -> None:
        await session.ensure_session()
        refresh_all()

    async def send_message() -> None:
        text = input_field.value or ""
        if not text.strip() or not session.can_send:
            return
        input_field.value = ""
        send_btn.disable()
        await session.send(text)
        refresh_all()
        if session.error:
            ui.notify(session.error, type="negative")

    def new_chat() -> None:
        session.new_thread()
        refresh_all()

    def switch_thread(index: int) -> None:
        session.switch_thread(index)
        refresh_all()

    def delete_thread(index: int) -> None:
        session.delete_thread(index)
        refresh_all()

    def dismiss_error() -> None:
        session.dismiss_error()
        message_list.refresh()

    # === UI Layout ===
    with ui.left_drawer(value=True).classes("bg-white"):
        ui.button("New Chat", icon="add", on_click=new_chat).props("unelevated").classes(
            "w-full mb-2"
        )
        thread_list()

    with ui.column().classes("w-full max-w-5xl mx-auto h-[90vh] bg-white rounded-2xl"):
        with ui.row().classes("w-full border-b p-4 items-center justify-between"):
            ui.label("AI Assistant").classes("text-lg font-semibold")
            ui.label().bind_text_from(
                session, "client_secret", lambda s: "Session active" if s else "Initializing..."
            ).classes("text-sm text-slate-500")

        with ui.scroll_area().classes("flex-grow w-full"):
            with ui.column().classes("w-full p-4 gap-4"):
                message_list()

        with ui.row().classes("w-full border-t p-4 gap-2 items-end no-wrap"):
            input_field = (
                ui.textarea(placeholder="Type a message... (Shift+Enter for new line)")
                .props("autogrow outlined dense rows=1")
                .classes("flex-grow")
                .on("keydown.enter.exact.prevent", send_message)
            )
            send_btn = ui.button("Send", on_click=send_message).props("unelevated")
            send_btn.disable()

    ui.timer(STREAM_REFRESH_SECONDS, refresh_while_streaming)
    ui.timer(0.1, init_session, once=True)
