#!/usr/bin/env python3
"""
Omondi AI Gradio studio - generate, enhance and stylize images, make narrated
clips, manage characters and chat with the assistant.

Run with: python -m omondi.gui
"""

import logging
import mimetypes
import os
import uuid
from typing import List, Optional

import gradio as gr
from pydantic import ValidationError

from omondi.ai import images as image_flows
from omondi.ai.chat import chart_frame, chat
from omondi.ai.provider import GeminiProvider, Provider
from omondi.ai.video import VideoContext, generate_video
from omondi.core import characters as store
from omondi.core.config import MEGABYTE, Settings
from omondi.core.errors import (
    CharacterExistsError,
    ConfigurationError,
    GenerationError,
    InvalidMediaError,
    QuotaExceededError,
)
from omondi.core.media import MediaPart
from omondi.core.security import verify_password
from omondi.db import Database, User
from omondi.runners import FFmpegRunner
from omondi.schemas import (
    AnimatedVideoRequest,
    CharacterCreate,
    CharacterImage,
    ChartData,
    ChatMessage,
    StillVideoRequest,
)

logger = logging.getLogger(__name__)

CHAT_STORAGE_KEY = "omondi_chat_history"


def read_media(path: str) -> MediaPart:
    """Load an uploaded file as a MediaPart."""
    mime_type, _ = mimetypes.guess_type(path)
    with open(path, "rb") as f:
        return MediaPart(mime_type=mime_type or "image/png", data=f.read())


def _paths(files) -> List[str]:
    if not files:
        return []
    return [f if isinstance(f, str) else f.name for f in files]


def to_chatbot(history: list) -> list:
    """Stored history uses provider roles; the Chatbot wants 'assistant'."""
    return [
        {"role": "assistant" if m["role"] == "model" else "user", "content": m["content"]}
        for m in history or []
    ]


class Studio:
    """Collaborators shared by all tabs."""

    def __init__(
        self,
        settings: Settings,
        database: Database,
        provider: Optional[Provider] = None,
        runner: Optional[FFmpegRunner] = None,
    ):
        self.settings = settings
        self.database = database
        self._provider = provider
        self.runner = runner or FFmpegRunner.from_settings(settings)
        self.output_dir = os.path.join(settings.shared_data_path, "output")
        os.makedirs(self.output_dir, exist_ok=True)

    @property
    def provider(self) -> Provider:
        if self._provider is None:
            try:
                self._provider = GeminiProvider.from_settings(self.settings)
            except ConfigurationError as e:
                logger.error(f"Provider unavailable: {e}")
                raise gr.Error("The AI provider is not configured.")
        return self._provider

    def save_output(self, media: MediaPart, prefix: str) -> str:
        path = os.path.join(self.output_dir, f"{prefix}_{uuid.uuid4().hex[:8]}{media.extension}")
        with open(path, "wb") as f:
            f.write(media.data)
        return path

    def authenticate(self, username: str, password: str) -> bool:
        db = self.database.session()
        try:
            user = db.query(User).filter(User.username == username).first()
            return verify_password(password, user.password_hash if user else None)
        finally:
            db.close()

    # ----------------------------------------------------------- images

    def generate_image(self, description: str, files, character_id: Optional[str]):
        description = (description or "").strip()
        paths = _paths(files)
        if paths and character_id:
            raise gr.Error("Choose either images to enhance or a character, not both.")
        try:
            if paths:
                result = image_flows.enhance_images(
                    self.provider, [read_media(p) for p in paths], description or None
                )
            elif character_id:
                if not description:
                    raise gr.Error("Describe the scene for your character.")
                db = self.database.session()
                try:
                    references = store.get_character_images(db, uuid.UUID(character_id))
                finally:
                    db.close()
                if not references:
                    raise gr.Error("Character not found.")
                result = image_flows.generate_image_with_character(
                    self.provider, description, references
                )
            elif description:
                result = image_flows.generate_image_from_description(self.provider, description)
            else:
                raise gr.Error("Please provide a description or at least one image.")
        except GenerationError as e:
            logger.error(f"Image generation failed: {e}")
            raise gr.Error("Could not generate image. Please try a different prompt.")
        return self.save_output(MediaPart.from_data_uri(result), "image")

    def improve_prompt(self, description: str):
        if not (description or "").strip():
            raise gr.Error("Please enter a description to improve.")
        try:
            return image_flows.improve_prompt(self.provider, description)
        except GenerationError as e:
            logger.error(f"Prompt improvement failed: {e}")
            raise gr.Error("Could not improve the prompt.")

    def transfer_style(self, prompt: str, style_path: Optional[str], strength: float):
        if not (prompt or "").strip():
            raise gr.Error("Please describe the image to generate.")
        if not style_path:
            raise gr.Error("Please upload a style image.")
        try:
            result = image_flows.transfer_style(
                self.provider, prompt, read_media(style_path), float(strength)
            )
        except GenerationError as e:
            logger.error(f"Style transfer failed: {e}")
            raise gr.Error("Could not apply the style. Please try again.")
        return self.save_output(MediaPart.from_data_uri(result), "styled")

    # ----------------------------------------------------------- video

    def generate_video(self, mode: str, image_path: Optional[str], prompt: str, narration: str):
        narration = (narration or "").strip() or None
        try:
            if mode == "animate":
                if not (prompt or "").strip():
                    raise gr.Error("Please describe the video.")
                image = read_media(image_path).to_data_uri() if image_path else None
                request = AnimatedVideoRequest(prompt=prompt, image=image, narration=narration)
            else:
                if not image_path:
                    raise gr.Error("Please upload an image.")
                request = StillVideoRequest(
                    image=read_media(image_path).to_data_uri(), narration=narration, prompt=prompt or None
                )
            ctx = VideoContext.from_settings(self.settings, self.provider, self.runner)
            result = generate_video(ctx, request)
        except GenerationError as e:
            logger.error(f"Video generation failed: {e}")
            raise gr.Error("Could not generate video or audio. Please try again.")

        video_path = self.save_output(result.video, "video")
        audio_path = self.save_output(result.audio, "narration") if result.audio else None
        return video_path, audio_path

    # ----------------------------------------------------------- characters

    def character_choices(self):
        db = self.database.session()
        try:
            characters = store.list_characters(db)
            used = store.total_storage(db)
        finally:
            db.close()
        choices = [(f"{c.name} ({len(c.images)} images)", str(c.id)) for c in characters]
        usage = (
            f"**Storage:** {used / MEGABYTE:.2f}MB / {self.settings.storage_quota_mb}MB"
        )
        return choices, usage

    def refresh_characters(self):
        choices, usage = self.character_choices()
        return gr.update(choices=choices, value=None), gr.update(choices=choices, value=None), usage

    def create_character(self, name: str, files):
        paths = _paths(files)
        try:
            images = []
            for path in paths:
                media = read_media(path)
                images.append(CharacterImage(data_uri=media.to_data_uri(), size=media.size))
            data = CharacterCreate(name=name or "", images=images)
        except (ValidationError, InvalidMediaError):
            raise gr.Error("Give the character a name and at least one image.")

        db = self.database.session()
        try:
            store.create_character(db, data, self.settings.storage_quota_bytes)
        except CharacterExistsError:
            raise gr.Error("A character with this name already exists.")
        except QuotaExceededError:
            raise gr.Error(
                f"You have reached the {self.settings.storage_quota_mb}MB storage limit. "
                "Please delete existing characters to train a new one."
            )
        finally:
            db.close()
        gr.Info(f"Character '{data.name}' saved.")
        return self.refresh_characters()

    def delete_character(self, character_id: Optional[str]):
        if not character_id:
            raise gr.Error("Select a character to delete.")
        db = self.database.session()
        try:
            store.delete_character(db, uuid.UUID(character_id))
        finally:
            db.close()
        return self.refresh_characters()

    # ----------------------------------------------------------- chat

    def send_message(self, message: str, history: list):
        """
        Run one chat turn. On failure the pre-send history is restored and the
        message is left in the textbox.
        """
        previous = list(history or [])
        hidden = gr.update(visible=False)
        if not (message or "").strip():
            return previous, to_chatbot(previous), message, hidden, hidden

        try:
            output = chat(self.provider, [ChatMessage(**m) for m in previous], message)
        except GenerationError as e:
            logger.error(f"Chat turn failed: {e}")
            gr.Warning("The assistant could not respond. Please try again.")
            return previous, to_chatbot(previous), message, hidden, hidden

        updated = previous + [
            {"role": "user", "content": message},
            {
                "role": "model",
                "content": output.response,
                "chart": output.chart.model_dump() if output.chart else None,
            },
        ]
        bar, line = self.chart_updates(output.chart)
        return updated, to_chatbot(updated), "", bar, line

    @staticmethod
    def chart_updates(chart: Optional[ChartData]):
        hidden = gr.update(visible=False)
        if chart is None:
            return hidden, hidden
        shown = gr.update(
            value=chart_frame(chart),
            x=chart.index,
            y="value",
            color="series",
            title=chart.title,
            visible=True,
        )
        if chart.type == "bar":
            return shown, hidden
        return hidden, shown


def create_gui(studio: Studio):
    """Create the Gradio interface."""

    with gr.Blocks(title="Omondi AI Studio", theme=gr.themes.Soft()) as demo:
        gr.Markdown(
            """
        # 🎨 Omondi AI Studio

        Generate and enhance images, keep characters consistent, turn stills into
        narrated clips, and chat with your design assistant.
        """
        )

        chat_history = gr.BrowserState([], storage_key=CHAT_STORAGE_KEY)

        with gr.Tab("Generate"):
            with gr.Row():
                with gr.Column(scale=1):
                    description = gr.Textbox(label="Description", lines=4)
                    improve_btn = gr.Button("✨ Improve prompt", size="sm")
                    source_images = gr.File(
                        label="Images to enhance (optional)",
                        file_count="multiple",
                        file_types=["image"],
                        type="filepath",
                    )
                    character_pick = gr.Dropdown(label="Character (optional)", choices=[])
                    generate_btn = gr.Button("🖼️ Generate", variant="primary")
                with gr.Column(scale=1):
                    image_output = gr.Image(label="Result", type="filepath", interactive=False)

        with gr.Tab("Style"):
            with gr.Row():
                with gr.Column(scale=1):
                    style_prompt = gr.Textbox(label="What to generate", lines=3)
                    style_image = gr.Image(label="Style image", type="filepath", sources=["upload"])
                    style_strength = gr.Slider(0.0, 1.0, value=0.5, step=0.05, label="Style strength")
                    style_btn = gr.Button("🖌️ Apply style", variant="primary")
                with gr.Column(scale=1):
                    style_output = gr.Image(label="Result", type="filepath", interactive=False)

        with gr.Tab("Video"):
            with gr.Row():
                with gr.Column(scale=1):
                    video_mode = gr.Radio(
                        choices=[("Still image", "still"), ("Animate", "animate")],
                        value="still",
                        label="Mode",
                    )
                    video_image = gr.Image(label="Image", type="filepath", sources=["upload"])
                    video_prompt = gr.Textbox(label="Prompt", lines=2)
                    narration = gr.Textbox(label="Narration (optional)", lines=3)
                    video_btn = gr.Button("🎬 Generate video", variant="primary")
                with gr.Column(scale=1):
                    video_output = gr.Video(label="Video", interactive=False, autoplay=True)
                    audio_output = gr.Audio(label="Narration", type="filepath", interactive=False)

        with gr.Tab("Characters"):
            usage = gr.Markdown()
            with gr.Row():
                with gr.Column(scale=1):
                    character_name = gr.Textbox(label="Character name")
                    character_files = gr.File(
                        label="Reference images",
                        file_count="multiple",
                        file_types=["image"],
                        type="filepath",
                    )
                    create_btn = gr.Button("💾 Save character", variant="primary")
                with gr.Column(scale=1):
                    character_list = gr.Dropdown(label="Saved characters", choices=[])
                    delete_btn = gr.Button("🗑️ Delete", variant="stop")

        with gr.Tab("Chat"):
            chatbot = gr.Chatbot(type="messages", height=420)
            bar_chart = gr.BarPlot(visible=False)
            line_chart = gr.LinePlot(visible=False)
            with gr.Row():
                chat_input = gr.Textbox(label="Message", scale=4)
                send_btn = gr.Button("Send", variant="primary", scale=1)
            clear_btn = gr.Button("Clear chat", size="sm")

        # Event handlers
        improve_btn.click(fn=studio.improve_prompt, inputs=[description], outputs=[description])
        generate_btn.click(
            fn=studio.generate_image,
            inputs=[description, source_images, character_pick],
            outputs=[image_output],
        )
        style_btn.click(
            fn=studio.transfer_style,
            inputs=[style_prompt, style_image, style_strength],
            outputs=[style_output],
        )
        video_btn.click(
            fn=studio.generate_video,
            inputs=[video_mode, video_image, video_prompt, narration],
            outputs=[video_output, audio_output],
        )
        create_btn.click(
            fn=studio.create_character,
            inputs=[character_name, character_files],
            outputs=[character_pick, character_list, usage],
        )
        delete_btn.click(
            fn=studio.delete_character,
            inputs=[character_list],
            outputs=[character_pick, character_list, usage],
        )

        chat_outputs = [chat_history, chatbot, chat_input, bar_chart, line_chart]
        send_btn.click(fn=studio.send_message, inputs=[chat_input, chat_history], outputs=chat_outputs)
        chat_input.submit(fn=studio.send_message, inputs=[chat_input, chat_history], outputs=chat_outputs)
        clear_btn.click(
            fn=lambda: ([], [], gr.update(visible=False), gr.update(visible=False)),
            outputs=[chat_history, chatbot, bar_chart, line_chart],
        )

        demo.load(fn=studio.refresh_characters, outputs=[character_pick, character_list, usage])
        demo.load(fn=to_chatbot, inputs=[chat_history], outputs=[chatbot])

    return demo


def main():
    """Run the Gradio app."""
    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level, format="%(asctime)s - %(levelname)s - %(message)s"
    )

    logger.info("=" * 60)
    logger.info("Omondi AI Studio Starting")
    logger.info("=" * 60)
    logger.info(f"  SHARED_DATA_PATH: {settings.shared_data_path}")
    logger.info(f"  IMAGE_MODEL: {settings.image_model}")
    logger.info(f"  TEXT_MODEL: {settings.text_model}")
    logger.info(f"  VIDEO_MODEL: {settings.video_model}")
    logger.info("=" * 60)

    database = Database(settings.database_url)
    database.init_db()
    database.seed_admin(settings.admin_username, settings.admin_password)

    studio = Studio(settings, database)
    if not studio.runner.is_available():
        logger.warning("ffmpeg/ffprobe not found; video generation will fail")
    if not settings.gemini_api_key:
        logger.warning("GEMINI_API_KEY is not set; generation will fail")

    demo = create_gui(studio)
    demo.launch(
        server_name="0.0.0.0",
        server_port=7860,
        share=False,
        show_error=True,
        auth=studio.authenticate,
    )


if __name__ == "__main__":
    main()
