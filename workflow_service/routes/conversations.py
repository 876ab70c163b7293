from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required, get_jwt_identity
from workflow_service.services.conversation_service import (
    create_conversation,
    get_conversation,
    list_conversations,
)
from workflow_service.services.message_service import list_messages

conversations_bp = Blueprint('conversations', __name__)


@conversations_bp.route('/conversations', methods=['POST'])
@jwt_required()
def create_conversation_route():
    """
    Create a conversation
    ---
    tags:
      - Conversations
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - type
            - participants
          properties:
            type:
              type: string
              example: pre_sales
            participants:
              type: array
              items:
                type: string
            context:
              type: object
    responses:
      201:
        description: Conversation created
      400:
        description: Caller not a participant, or fewer than two participants
    """
    data = request.get_json(silent=True) or {}
    conversation = create_conversation(
        caller_id=get_jwt_identity(),
        conversation_type=data.get('type'),
        participants=data.get('participants'),
        context=data.get('context'),
    )
    return jsonify(conversation.to_dict()), 201


@conversations_bp.route('/conversations', methods=['GET'])
@jwt_required()
def list_conversations_route():
    """
    Inbox: conversations the caller participates in, newest first
    ---
    tags:
      - Conversations
    security:
      - Bearer: []
    parameters:
      - name: page
        in: query
        type: integer
      - name: per_page
        in: query
        type: integer
        default: 20
    responses:
      200:
        description: "{results: Conversation[]}"
    """
    page = request.args.get('page', type=int)
    per_page = request.args.get('per_page', 20, type=int)

    result = list_conversations(get_jwt_identity(), page=page, per_page=per_page)
    body = {'results': [c.to_dict() for c in result['data']]}
    if result['pagination']:
        body['pagination'] = result['pagination']
    return jsonify(body), 200


@conversations_bp.route('/conversations/<conversation_id>', methods=['GET'])
@jwt_required()
def get_conversation_route(conversation_id):
    """
    Get a single conversation
    ---
    tags:
      - Conversations
    security:
      - Bearer: []
    parameters:
      - name: conversation_id
        in: path
        type: string
        required: true
    responses:
      200:
        description: Conversation with its participants and lastMessageAt
      403:
        description: Caller is not a participant
      404:
        description: Conversation not found
    """
    conversation = get_conversation(conversation_id, get_jwt_identity())
    return jsonify(conversation.to_dict()), 200


@conversations_bp.route('/conversations/<conversation_id>/messages', methods=['GET'])
@jwt_required()
def list_messages_route(conversation_id):
    """
    Messages of a conversation, oldest first
    ---
    tags:
      - Conversations
    security:
      - Bearer: []
    responses:
      200:
        description: "{results: Message[]}"
      403:
        description: Caller is not a participant
      404:
        description: Conversation not found
    """
    messages = list_messages(get_jwt_identity(), conversation_id)
    return jsonify({'results': [m.to_dict() for m in messages]}), 200
