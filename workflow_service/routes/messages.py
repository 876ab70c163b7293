from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity
from workflow_service.services.message_service import send_message

messages_bp = Blueprint('messages', __name__)


@messages_bp.route('/messages', methods=['POST'])
@jwt_required()
def send_message_route():
    """
    Send a message to a conversation
    ---
    tags:
      - Messages
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - conversationId
            - text
          properties:
            conversationId:
              type: string
            text:
              type: string
            attachments:
              type: array
              items:
                type: string
    responses:
      201:
        description: Message created
      400:
        description: Missing conversationId or text
      403:
        description: Caller is not a participant
      404:
        description: Conversation not found
    """
    data = request.get_json(silent=True) or {}
    message = send_message(
        caller_id=get_jwt_identity(),
        conversation_id=data.get('conversationId'),
        text=data.get('text'),
        attachments=data.get('attachments'),
    )
    return jsonify(message.to_dict()), 201
